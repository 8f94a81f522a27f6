"""Shared utilities: logging setup and share path handling."""

from .paths import SharePath, normalize_relative_path
from .logging import setup_logging, get_logger, log_execution_time

__all__ = [
    "SharePath",
    "normalize_relative_path",
    "setup_logging",
    "get_logger",
    "log_execution_time"
]
