"""Tests for logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from uiflow.core.logging import configure_logging


def test_configure_logging_is_idempotent() -> None:
    """Test reconfiguring logging keeps a single rich handler."""
    configure_logging()
    configure_logging(verbose=True)

    logger = logging.getLogger("uiflow")
    handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
    assert len(handlers) == 1
    assert logger.level == logging.DEBUG


def test_messages_reach_target_console() -> None:
    """Test log records are rendered on the given console at the chosen level."""
    console = Console(record=True, width=120, color_system=None)
    configure_logging(target=console)

    logging.getLogger("uiflow.core.suite").info("register_new_user passed in %.2fs", 1.5)
    logging.getLogger("uiflow.core.verifier").debug("phase hydrating -> interacting")

    output = console.export_text()
    assert "register_new_user passed in 1.50s" in output
    assert "phase hydrating" not in output
