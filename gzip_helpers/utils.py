"""Shared exceptions and helpers."""

from __future__ import annotations


class GzipHelperError(Exception):
    """Base exception for gzip helper errors."""


class ConfigError(GzipHelperError):
    """Raised when configuration is invalid."""


class CompressionError(GzipHelperError, OSError):
    """Raised when gzip data is corrupt or truncated."""


def format_bytes(size: int) -> str:
    """
    Convert bytes to a human-readable string.

    Args:
        size: Size in bytes.

    Returns:
        Human-readable size string.
    """
    if size < 0:
        raise ValueError("Size must be non-negative.")

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    value = float(size)
    for unit in units:
        if value < 1024 or unit == units[-1]:
            if unit == "B":
                return f"{int(value)} {unit}"
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} PB"
