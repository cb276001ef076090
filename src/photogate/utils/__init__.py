"""Utility modules for photogate."""

from .io import load_data, save_data
from .log import setup_logging, get_logger

__all__ = [
    "load_data",
    "save_data",
    "setup_logging",
    "get_logger",
]
