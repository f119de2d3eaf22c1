"""Gzip helpers for byte buffers, streams and files."""

from .core import (
    CompressionLevel,
    GzipDecodingReader,
    MemberDecoder,
    RewindableReader,
    compress,
    decompress_if_needed,
    is_gzip,
    open_encoder,
    supports_mark,
    wrap_stream_if_gzip,
)
from .file_processor import gunzip_file_if_needed, gzip_file
from .utils import CompressionError, ConfigError, GzipHelperError

__all__ = [
    "CompressionLevel",
    "GzipDecodingReader",
    "MemberDecoder",
    "RewindableReader",
    "compress",
    "decompress_if_needed",
    "is_gzip",
    "open_encoder",
    "supports_mark",
    "wrap_stream_if_gzip",
    "gunzip_file_if_needed",
    "gzip_file",
    "CompressionError",
    "ConfigError",
    "GzipHelperError",
]
