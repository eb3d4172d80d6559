"""Logging configuration rendered through rich."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def configure_logging(verbose: bool = False, target: Console | None = None) -> None:
    """Route the ``uiflow`` logger tree through a RichHandler."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger("uiflow")
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=target or console,
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
