"""
Console logging for gift-client.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed by the entry point (the CLI) through ``setup_logging()``.

Usage::

    from gift_client.logging_config import setup_logging
    setup_logging("DEBUG")
"""

from __future__ import annotations

import logging

_configured = False


class ConsoleFormatter(logging.Formatter):
    """Human-readable single-line format."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a stderr handler to the ``gift_client`` logger.

    Repeated calls only update the level, so the CLI can call this freely.
    """
    global _configured

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("gift_client")
    logger.setLevel(level)

    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(ConsoleFormatter())
        logger.addHandler(handler)
        _configured = True

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


def reset_logging() -> None:
    """Remove installed handlers - for test isolation."""
    global _configured

    logger = logging.getLogger("gift_client")
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    _configured = False
