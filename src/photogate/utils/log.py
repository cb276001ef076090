"""Logging helpers shared across photogate modules."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    log_level: Union[str, int] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    fmt: str = _DEFAULT_FORMAT,
) -> None:
    """
    Configure the ``photogate`` logger hierarchy.

    Args:
        log_level: Level name or number applied to the package logger
        log_file: Optional file that receives a copy of every record
        fmt: Record format string
    """
    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger("photogate")
    root.setLevel(log_level)

    # Calling setup twice must not duplicate output
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a module inside the package."""
    return logging.getLogger(name)
