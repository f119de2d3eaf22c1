"""File helpers: gzip and gunzip whole files in chunks."""

from __future__ import annotations

import contextlib
import logging
import time
import zlib
from pathlib import Path
from typing import Callable, Optional

import aiofiles

from .common.constants import GZIP_MAGIC, GZIP_WBITS
from .config import Config
from .core.compression import CompressionLevel, MemberDecoder, is_gzip
from .utils import format_bytes

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, Optional[str]], None]


def _report_progress(
    callback: Optional[ProgressCallback],
    current: int,
    total: int,
    name: Optional[str],
    last_report: float,
) -> float:
    if not callback:
        return last_report
    now = time.monotonic()
    if now - last_report >= 1 or current >= total:
        callback(current, total, name)
        return now
    return last_report


@contextlib.asynccontextmanager
async def _atomic_output(destination: Path):
    """Open a temp file next to destination and move it into place on success."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    temp_path = destination.with_suffix(destination.suffix + ".tmp")
    try:
        async with aiofiles.open(temp_path, "wb") as outfile:
            yield outfile
        temp_path.replace(destination)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


async def _starts_with_magic(path: Path) -> bool:
    async with aiofiles.open(path, "rb") as infile:
        head = await infile.read(len(GZIP_MAGIC))
    return is_gzip(head)


async def _copy_file(
    source: Path,
    destination: Path,
    buffer_size: int,
    progress_callback: Optional[ProgressCallback],
) -> None:
    total = source.stat().st_size
    processed = 0
    last_report = 0.0

    async with aiofiles.open(source, "rb") as infile, _atomic_output(
        destination
    ) as outfile:
        while True:
            chunk = await infile.read(buffer_size)
            if not chunk:
                break
            await outfile.write(chunk)
            processed += len(chunk)
            last_report = _report_progress(
                progress_callback, processed, total, str(source), last_report
            )


async def gzip_file(
    source: Path,
    destination: Path,
    level: Optional[CompressionLevel] = None,
    buffer_size: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Path:
    """
    Gzip a file unless it already starts with the gzip magic number.

    Args:
        source: File to compress.
        destination: Output path.
        level: Compression level, defaults to GZIP_COMPRESSION_LEVEL.
        buffer_size: Read size in bytes, defaults to IO_BUFFER_SIZE.
        progress_callback: Optional progress callback.

    Returns:
        The destination path.
    """
    if level is None:
        level = Config.get_instance().compression_level
    if buffer_size is None:
        buffer_size = Config.get_instance().io_buffer_size

    if await _starts_with_magic(source):
        logger.info("%s is already gzip, copying as is.", source)
        await _copy_file(source, destination, buffer_size, progress_callback)
        return destination

    total = source.stat().st_size
    processed = 0
    last_report = 0.0
    encoder = zlib.compressobj(int(level), zlib.DEFLATED, GZIP_WBITS)

    async with aiofiles.open(source, "rb") as infile, _atomic_output(
        destination
    ) as outfile:
        while True:
            chunk = await infile.read(buffer_size)
            if not chunk:
                break
            await outfile.write(encoder.compress(chunk))
            processed += len(chunk)
            last_report = _report_progress(
                progress_callback, processed, total, str(source), last_report
            )
        await outfile.write(encoder.flush())

    logger.info(
        "Compressed %s (%s -> %s).",
        source,
        format_bytes(total),
        format_bytes(destination.stat().st_size),
    )
    return destination


async def gunzip_file_if_needed(
    source: Path,
    destination: Path,
    buffer_size: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Path:
    """
    Decompress a gzip file, or copy it unchanged if it is not gzip.

    Concatenated gzip members are decompressed one after another. Bytes
    after a member that do not start with the gzip magic are ignored. The
    destination is only created once the whole file decoded cleanly.

    Args:
        source: File to decompress.
        destination: Output path.
        buffer_size: Read size in bytes, defaults to IO_BUFFER_SIZE.
        progress_callback: Optional progress callback.

    Returns:
        The destination path.

    Raises:
        CompressionError: If the gzip data is corrupt or truncated.
    """
    if buffer_size is None:
        buffer_size = Config.get_instance().io_buffer_size

    if not await _starts_with_magic(source):
        await _copy_file(source, destination, buffer_size, progress_callback)
        return destination

    total = source.stat().st_size
    processed = 0
    last_report = 0.0
    decoder = MemberDecoder()

    async with aiofiles.open(source, "rb") as infile, _atomic_output(
        destination
    ) as outfile:
        while not decoder.finished:
            chunk = await infile.read(buffer_size)
            if not chunk:
                break
            processed += len(chunk)
            await outfile.write(decoder.decompress(chunk))
            last_report = _report_progress(
                progress_callback, processed, total, str(source), last_report
            )
        decoder.check_complete()

    if decoder.finished:
        logger.warning("Ignored trailing bytes after gzip data in %s.", source)
    return destination
