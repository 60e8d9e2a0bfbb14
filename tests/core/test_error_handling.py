"""
Tests for fail-soft failure reporting.
"""

from charledger.core.error_handling import FailureKind, FailureReporter, LedgerFailure


def test_report_records_and_logs(mocker):
    """Test that a failure is kept in the history and logged as a warning."""
    mock_warning = mocker.patch("charledger.core.error_handling.log_warning")
    reporter = FailureReporter()

    failure = reporter.report(FailureKind.BUDGET_EXCEEDED, "No slot left", {"source": "class"})

    assert failure == LedgerFailure(
        kind=FailureKind.BUDGET_EXCEEDED,
        message="No slot left",
        context={"source": "class"},
    )
    assert reporter.last_failure is failure
    mock_warning.assert_called_once_with(
        "No slot left", {"kind": "budget_exceeded", "source": "class"}
    )


def test_history_is_bounded(mocker):
    """Test that only the most recent failures are kept."""
    mocker.patch("charledger.core.error_handling.log_warning")
    reporter = FailureReporter(history_size=2)

    reporter.report(FailureKind.VALIDATION, "first")
    reporter.report(FailureKind.NOT_FOUND, "second")
    reporter.report(FailureKind.VALIDATION, "third")

    assert [f.message for f in reporter.history] == ["second", "third"]
    assert reporter.count() == 2
    assert reporter.count(FailureKind.VALIDATION) == 1


def test_clear_forgets_failures(mocker):
    """Test that clearing empties the history."""
    mocker.patch("charledger.core.error_handling.log_warning")
    reporter = FailureReporter()
    reporter.report(FailureKind.VALIDATION, "bad")

    reporter.clear()

    assert reporter.last_failure is None
    assert reporter.count() == 0
