"""
Fail-soft error reporting for the proficiency ledger.

Ledger operations never raise for bad input. They describe the rejection
as a LedgerFailure, hand it to a FailureReporter and return a sentinel
value (False, an empty collection, or None).
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from catchery import log_warning


class FailureKind(Enum):
    """The ways a ledger operation can decline a request."""

    VALIDATION = "validation"  # Missing or malformed arguments
    BUDGET_EXCEEDED = "budget_exceeded"  # No free choice slot left
    NOT_FOUND = "not_found"  # Target of a remove/deselect is absent


@dataclass
class LedgerFailure:
    """A rejected ledger operation with the context it was called with."""

    kind: FailureKind
    message: str
    context: dict[str, Any] = field(default_factory=dict)


class FailureReporter:
    """Collects rejected operations and logs them as warnings."""

    def __init__(self, history_size: int = 100) -> None:
        """
        Initialize the FailureReporter with an empty, bounded history.

        Args:
            history_size (int):
                How many failures to keep before the oldest are dropped.

        """
        self.history: deque[LedgerFailure] = deque(maxlen=history_size)

    def report(
        self,
        kind: FailureKind,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> LedgerFailure:
        """
        Records a failure and logs it.

        Args:
            kind (FailureKind): The failure category.
            message (str): Human readable description.
            context (dict[str, Any] | None): The arguments involved.

        Returns:
            LedgerFailure: The recorded failure.

        """
        failure = LedgerFailure(kind=kind, message=message, context=context or {})
        self.history.append(failure)
        log_warning(message, {"kind": kind.value, **failure.context})
        return failure

    @property
    def last_failure(self) -> LedgerFailure | None:
        """The most recent failure, if any."""
        return self.history[-1] if self.history else None

    def count(self, kind: FailureKind | None = None) -> int:
        """Number of recorded failures, optionally of a single kind."""
        if kind is None:
            return len(self.history)
        return sum(1 for failure in self.history if failure.kind == kind)

    def clear(self) -> None:
        """Forget every recorded failure."""
        self.history.clear()
