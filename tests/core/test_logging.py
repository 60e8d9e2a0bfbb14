"""
Tests for the logging helpers.
"""

import logging

from charledger.core.logging import get_logger, log_debug, log_info, log_warning, setup_logging
from rich.logging import RichHandler


def test_setup_logging_installs_rich_handler():
    """Test that the root logger ends up with a single rich handler."""
    setup_logging(logging.DEBUG)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], RichHandler)


def test_helpers_append_context(caplog):
    """Test that context is rendered as key=value pairs after the message."""
    caplog.set_level(logging.DEBUG, logger="charledger")

    log_info("Source grants applied", {"source": "Race", "restored": 1})
    log_warning("No slot left")
    log_debug("Proficiency granted", {"new": True})

    assert caplog.messages == [
        "Source grants applied [source=Race restored=1]",
        "No slot left",
        "Proficiency granted [new=True]",
    ]
    assert get_logger("charledger").name == "charledger"
