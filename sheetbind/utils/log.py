"""Logging helpers for the sheetbind package."""

# Module responsibilities:
# - Centralize logging configuration for the package root logger.
# - Provide get_logger() returning child loggers that share one configuration.

from __future__ import annotations

import logging
import sys
from typing import Optional

_LOG_CONFIGURED = False


def _configure_logging(level: int = logging.INFO) -> None:
    """Configure the package root logger once with a console handler."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger("sheetbind")
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    _LOG_CONFIGURED = True


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Return a package-scoped logger.

    Args:
        name: Logger name suffix appended to the package root logger namespace.
        level: Optional level applied to the package root logger.

    Returns:
        Logger scoped under ``sheetbind``.
    """

    _configure_logging()
    if level is not None:
        logging.getLogger("sheetbind").setLevel(level)
    return logging.getLogger(f"sheetbind.{name}")
