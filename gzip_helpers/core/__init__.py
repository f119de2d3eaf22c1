"""Core gzip logic (pure Python, no file system access)."""

from .compression import (
    CompressionLevel,
    MemberDecoder,
    compress,
    decompress_if_needed,
    is_gzip,
    open_encoder,
)
from .streams import (
    GzipDecodingReader,
    RewindableReader,
    supports_mark,
    wrap_stream_if_gzip,
)

__all__ = [
    "CompressionLevel",
    "MemberDecoder",
    "compress",
    "decompress_if_needed",
    "is_gzip",
    "open_encoder",
    "GzipDecodingReader",
    "RewindableReader",
    "supports_mark",
    "wrap_stream_if_gzip",
]
