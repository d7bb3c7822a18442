"""Logging configuration shared by the CLI and the API server."""

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

LOG_FORMAT = "%(message)s"
ROOT_LOGGER = "trend_intel"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a rich handler to the package logger once and set its level."""
    logger = logging.getLogger(ROOT_LOGGER)
    if isinstance(level, str):
        level = level.strip().upper()
    logger.setLevel(level)

    # Avoid stacking handlers when called from both the CLI and the server.
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return logger

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
