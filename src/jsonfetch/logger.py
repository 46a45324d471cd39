"""Logging utilities for jsonfetch.

This module provides configuration helpers to enable rich-formatted logging
for the library.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler


def setup_logging(
    level: int = logging.INFO,
    format_string: str = "%(message)s",
    date_format: str = "[%X]",
) -> logging.Logger:
    """Configures the jsonfetch logger with a RichHandler.

    Meant to be called by the application using the library, never by the
    library itself during import. Calling it again replaces the handler
    instead of stacking a second one.

    Args:
        level: The logging level to set (e.g., logging.DEBUG, logging.INFO).
            Defaults to logging.INFO.
        format_string: The log format string. RichHandler renders time and
            level itself, so the default is just the message.
        date_format: The date format string. Defaults to "[%X]".

    Returns:
        The configured ``jsonfetch`` logger.
    """
    logger = logging.getLogger("jsonfetch")
    logger.setLevel(level)

    if logger.handlers:
        logger.handlers.clear()

    handler = RichHandler(
        rich_tracebacks=True,
        markup=True,
        show_time=True,
        show_level=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter(fmt=format_string, datefmt=date_format))

    logger.addHandler(handler)

    # The handler above is the only output; do not echo through the root logger.
    logger.propagate = False
    return logger
