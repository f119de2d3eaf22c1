"""Gzip compression and decompression of byte buffers."""

from __future__ import annotations

import enum
import gzip
import io
import logging
import zlib
from typing import BinaryIO, Optional

from ..common.constants import GZIP_MAGIC, GZIP_WBITS
from ..utils import CompressionError

logger = logging.getLogger(__name__)


class CompressionLevel(enum.IntEnum):
    """zlib compression levels accepted by the encoder."""

    FASTEST = zlib.Z_BEST_SPEED
    DEFAULT = zlib.Z_DEFAULT_COMPRESSION
    BEST = zlib.Z_BEST_COMPRESSION

    @classmethod
    def from_name(cls, name: str) -> "CompressionLevel":
        """
        Look up a level by case-insensitive name.

        Raises:
            ValueError: If the name is unknown.
        """
        try:
            return cls[name.strip().upper()]
        except KeyError as exc:
            choices = ", ".join(level.name.lower() for level in cls)
            raise ValueError(
                f"Unknown compression level {name!r}; expected one of {choices}."
            ) from exc


def open_encoder(
    sink: BinaryIO, level: CompressionLevel = CompressionLevel.DEFAULT
) -> gzip.GzipFile:
    """
    Open a gzip encoder that writes into ``sink``.

    Pass ``CompressionLevel.FASTEST`` for the best-speed variant. Closing the
    encoder writes the gzip trailer but leaves ``sink`` open.

    Args:
        sink: Writable binary file object.
        level: Compression level.

    Returns:
        Writable gzip file object, usable as a context manager.
    """
    return gzip.GzipFile(
        fileobj=sink, mode="wb", compresslevel=int(level), mtime=0
    )


class MemberDecoder:
    """
    Incremental decoder for one or more concatenated gzip members.

    Once a member ends, the following bytes start another member only if
    they begin with the gzip magic number. Anything else ends the data and
    is ignored, so a trailing non-gzip tail does not fail the decode.
    """

    def __init__(self) -> None:
        self._decoder = zlib.decompressobj(GZIP_WBITS)
        self._tail = b""
        self.finished = False

    @property
    def eof(self) -> bool:
        """True if the data seen so far ends on a member boundary."""
        return self.finished or self._decoder.eof

    def decompress(self, data: bytes) -> bytes:
        """
        Feed compressed bytes and return what they inflate to.

        Raises:
            CompressionError: If the deflate data or a header is corrupt.
        """
        if self.finished:
            return b""
        data = self._tail + bytes(data)
        self._tail = b""
        output = []
        while data:
            if self._decoder.eof:
                if len(data) < len(GZIP_MAGIC):
                    self._tail = data
                    break
                if not data.startswith(GZIP_MAGIC):
                    self.finished = True
                    break
                self._decoder = zlib.decompressobj(GZIP_WBITS)
            try:
                output.append(self._decoder.decompress(data))
            except zlib.error as exc:
                raise CompressionError(f"Corrupt gzip data: {exc}") from exc
            data = self._decoder.unused_data if self._decoder.eof else b""
        return b"".join(output)

    def check_complete(self) -> None:
        """
        Raises:
            CompressionError: If the input stopped inside a member.
        """
        if not self.eof:
            raise CompressionError(
                "Compressed data ended before the end-of-stream marker was reached."
            )


def is_gzip(src: Optional[bytes]) -> bool:
    """
    Check whether ``src`` starts with the gzip magic number 0x1f 0x8b.

    Only the first two bytes are checked, so raw data that happens to start
    with them is reported as gzip.
    """
    if src is None or len(src) < 2:
        return False
    return bytes(src[:2]) == GZIP_MAGIC


def compress(
    src: Optional[bytes],
    fallback: Optional[bytes],
    log: Optional[logging.Logger] = None,
) -> Optional[bytes]:
    """
    Gzip ``src`` unless it already looks gzip-encoded.

    Args:
        src: Bytes to compress.
        fallback: Value returned if compression fails.
        log: Logger receiving the failure, defaults to the module logger.

    Returns:
        Compressed bytes, ``src`` itself if already gzip, or ``fallback``.
    """
    if is_gzip(src):
        return src

    try:
        buffer = io.BytesIO()
        with open_encoder(buffer) as encoder:
            encoder.write(src)
        return buffer.getvalue()
    except Exception:
        (log or logger).error(
            "Gzip compression failed, returning fallback.", exc_info=True
        )
        return fallback


def decompress_if_needed(
    src: Optional[bytes],
    fallback: Optional[bytes],
    log: Optional[logging.Logger] = None,
) -> Optional[bytes]:
    """
    Decompress ``src`` if it is gzip-encoded, otherwise return it unchanged.

    Args:
        src: Possibly compressed bytes.
        fallback: Value returned if decompression fails.
        log: Logger receiving the failure, defaults to the module logger.

    Returns:
        Decompressed bytes, ``src`` itself, or ``fallback``.
    """
    if not is_gzip(src):
        return src

    try:
        decoder = MemberDecoder()
        data = decoder.decompress(src)
        decoder.check_complete()
        return data
    except Exception:
        (log or logger).error(
            "Gzip decompression failed, returning fallback.", exc_info=True
        )
        return fallback
