# === FILE: book2pdf/logger.py ===
"""Project logger for **book2pdf**.

The CLI group calls :func:`configure` once and hands the returned logger to
the downloader, the renderers and the merger::

    log = configure(level="DEBUG", log_file="book2pdf.log")
    Downloader(config, logger=log)

Code used as a library without the CLI falls back to :func:`null_logger`.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "book2pdf"

# Rotation of the optional log file
_MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_BACKUPS: Final[int] = 3


def _handlers(log_file: Union[str, Path, None]) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=_MAX_LOG_BYTES,
                backupCount=_LOG_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: Union[int, str] = "INFO",
    log_file: Union[str, Path, None] = None,
) -> logging.Logger:
    """Build the ``book2pdf`` logger: stdout plus an optional rotating file.

    Calling it again replaces the handlers of the previous call.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    lg.handlers.clear()
    for handler in _handlers(log_file):
        lg.addHandler(handler)
    lg.propagate = False
    return lg


def null_logger() -> logging.Logger:
    """Logger for library use without CLI bootstrap: records go nowhere."""
    lg = logging.getLogger(f"{LOGGER_NAME}.null")
    if not lg.handlers:
        lg.addHandler(logging.NullHandler())
    lg.propagate = False
    return lg


__all__ = ["configure", "null_logger", "LOG_FORMAT", "LOGGER_NAME"]
