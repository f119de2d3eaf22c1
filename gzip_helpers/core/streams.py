"""Sniffing readable streams for gzip data and inflating them in line."""

from __future__ import annotations

import io
import logging
from typing import BinaryIO, Optional

from ..common.constants import MARK_READ_LIMIT, PROBE_SIZE, SOURCE_READ_SIZE
from .compression import MemberDecoder, is_gzip

logger = logging.getLogger(__name__)


class RewindableReader(io.BufferedIOBase):
    """
    Buffering adapter that adds mark/reset to a forward-only stream.

    Only bytes read after ``mark()`` are kept, and no more than the read
    limit given to it. Reading past the limit drops the mark.
    """

    def __init__(self, raw: BinaryIO) -> None:
        super().__init__()
        self._raw: Optional[BinaryIO] = raw
        self._pending = bytearray()
        self._recorded: Optional[bytearray] = None
        self._read_limit = 0

    def readable(self) -> bool:
        return True

    def mark(self, read_limit: int) -> None:
        """
        Remember the current position.

        Args:
            read_limit: Bytes that may be read before the mark is dropped.
        """
        if read_limit < 0:
            raise ValueError("read_limit must be non-negative.")
        self._check_open()
        self._recorded = bytearray()
        self._read_limit = read_limit

    def reset(self) -> None:
        """
        Rewind to the last mark.

        Raises:
            OSError: If there is no mark or it was dropped.
        """
        self._check_open()
        if self._recorded is None:
            raise OSError("Resetting to invalid mark.")
        self._pending[:0] = self._recorded
        self._recorded = bytearray()

    def read(self, size: Optional[int] = -1) -> bytes:
        self._check_open()
        if size is None or size < 0:
            data = bytes(self._pending) + self._read_raw(None)
            self._pending.clear()
        else:
            data = bytes(self._pending[:size])
            del self._pending[:size]
            if len(data) < size:
                data += self._read_raw(size - len(data))
        self._record(data)
        return data

    def read1(self, size: int = -1) -> bytes:
        self._check_open()
        if self._pending:
            if size is None or size < 0:
                size = len(self._pending)
            data = bytes(self._pending[:size])
            del self._pending[:size]
        else:
            data = self._raw.read(size) or b""
        self._record(data)
        return data

    def detach(self) -> BinaryIO:
        """Release the raw stream without closing it."""
        raw, self._raw = self._raw, None
        if raw is None:
            raise ValueError("raw stream already detached")
        super().close()
        return raw

    def close(self) -> None:
        if self.closed:
            return
        raw, self._raw = self._raw, None
        try:
            if raw is not None:
                raw.close()
        finally:
            super().close()

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed file.")

    def _read_raw(self, size: Optional[int]) -> bytes:
        if size is None:
            return self._raw.read() or b""
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._raw.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _record(self, data: bytes) -> None:
        if self._recorded is None or not data:
            return
        if len(self._recorded) + len(data) > self._read_limit:
            self._recorded = None
        else:
            self._recorded += data


class _MemberRawReader(io.RawIOBase):
    """Raw reader inflating gzip members from a source stream."""

    def __init__(self, source: BinaryIO) -> None:
        super().__init__()
        self._source: Optional[BinaryIO] = source
        self._decoder = MemberDecoder()
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            if self._decoder.finished:
                return 0
            chunk = self._source.read(SOURCE_READ_SIZE)
            if not chunk:
                self._decoder.check_complete()
                return 0
            self._pending = self._decoder.decompress(chunk)
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def release(self) -> None:
        """Close without closing the source."""
        self._source = None
        super().close()

    def close(self) -> None:
        if self.closed:
            return
        source, self._source = self._source, None
        try:
            if source is not None:
                source.close()
        finally:
            super().close()


class GzipDecodingReader(io.BufferedReader):
    """
    Buffered reader that inflates ``source`` and closes it when closed.

    The gzip header is read on construction, so a corrupt or truncated
    header raises here rather than on the first read. In that case
    ``source`` is left open.
    """

    def __init__(self, source: BinaryIO) -> None:
        raw = _MemberRawReader(source)
        super().__init__(raw)
        try:
            self.peek(1)
        except BaseException:
            raw.release()
            raise


def supports_mark(stream: BinaryIO) -> bool:
    """Return True if ``stream`` can be rewound after a lookahead read."""
    if isinstance(stream, RewindableReader):
        return True
    seekable = getattr(stream, "seekable", None)
    return bool(seekable is not None and seekable())


def _read_up_to(stream: BinaryIO, size: int) -> bytes:
    data = b""
    while len(data) < size:
        chunk = stream.read(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def _peek(stream: BinaryIO, size: int) -> bytes:
    if isinstance(stream, RewindableReader):
        stream.mark(MARK_READ_LIMIT)
        probe = _read_up_to(stream, size)
        stream.reset()
        return probe

    position = stream.tell()
    probe = _read_up_to(stream, size)
    stream.seek(position)
    return probe


def wrap_stream_if_gzip(stream: BinaryIO) -> BinaryIO:
    """
    Return a stream that yields the decompressed data if ``stream`` is gzip.

    The probe bytes are pushed back, so whatever comes back reads from the
    same position ``stream`` was at. Forward-only streams come back wrapped
    in a ``RewindableReader``.

    Args:
        stream: Readable binary stream.

    Returns:
        A ``GzipDecodingReader`` over the stream, or the stream itself.

    Raises:
        OSError: If reading or rewinding the stream fails.
    """
    adapter: Optional[RewindableReader] = None
    if not supports_mark(stream):
        adapter = RewindableReader(stream)
        stream = adapter

    try:
        probe = _peek(stream, PROBE_SIZE)
        if len(probe) != PROBE_SIZE:
            logger.debug(
                "Stream shorter than %d bytes, passing through.", PROBE_SIZE)
            return stream
        if is_gzip(probe):
            return GzipDecodingReader(stream)
    except BaseException:
        if adapter is not None:
            adapter.detach()
        raise

    return stream
