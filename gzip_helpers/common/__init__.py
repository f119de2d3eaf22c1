"""Shared constants and logging setup."""

from .constants import GZIP_MAGIC, MARK_READ_LIMIT, PROBE_SIZE
from .logging import setup_logging

__all__ = [
    "GZIP_MAGIC",
    "MARK_READ_LIMIT",
    "PROBE_SIZE",
    "setup_logging",
]
