"""Tests for byte buffer compression helpers."""

from __future__ import annotations

import gzip
import io
import logging
import unittest
import zlib
from unittest import mock

from gzip_helpers.core import compression
from gzip_helpers.core.compression import (
    CompressionLevel,
    MemberDecoder,
    compress,
    decompress_if_needed,
    is_gzip,
    open_encoder,
)
from gzip_helpers.utils import CompressionError

FALLBACK = b"fallback"


class TestIsGzip(unittest.TestCase):
    def test_none_and_short_inputs(self) -> None:
        self.assertFalse(is_gzip(None))
        self.assertFalse(is_gzip(b""))
        self.assertFalse(is_gzip(b"\x1f"))

    def test_magic_bytes(self) -> None:
        self.assertTrue(is_gzip(b"\x1f\x8b"))
        self.assertTrue(is_gzip(bytearray(b"\x1f\x8b\x08")))
        self.assertFalse(is_gzip(b"\x1f\x00"))
        self.assertFalse(is_gzip(b"\x8b\x1f"))

    def test_compressed_output_is_detected(self) -> None:
        self.assertTrue(is_gzip(gzip.compress(b"hello")))


class TestCompress(unittest.TestCase):
    def test_round_trip(self) -> None:
        for data in (b"", b"hello", b"\x00" * 4096, bytes(range(256)) * 10):
            with self.subTest(size=len(data)):
                packed = compress(data, FALLBACK)
                self.assertTrue(is_gzip(packed))
                self.assertEqual(decompress_if_needed(packed, FALLBACK), data)

    def test_output_is_standard_gzip(self) -> None:
        self.assertEqual(gzip.decompress(compress(b"hello", FALLBACK)), b"hello")

    def test_compress_is_idempotent(self) -> None:
        once = compress(b"hello world", FALLBACK)
        self.assertEqual(compress(once, FALLBACK), once)

    def test_gzip_looking_input_passes_through(self) -> None:
        # raw data that happens to start with the magic is not compressed
        data = b"\x1f\x8bnot really gzip"
        self.assertIs(compress(data, FALLBACK), data)

    def test_output_is_deterministic(self) -> None:
        self.assertEqual(compress(b"same", FALLBACK), compress(b"same", FALLBACK))

    def test_encoder_failure_returns_fallback(self) -> None:
        with mock.patch.object(
            compression, "open_encoder", side_effect=OSError("disk full")
        ):
            with self.assertLogs("gzip_helpers.core.compression", "ERROR") as logs:
                result = compress(b"hello", FALLBACK)
        self.assertIs(result, FALLBACK)
        self.assertIn("compression failed", logs.output[0])

    def test_none_input_returns_fallback(self) -> None:
        with self.assertLogs("gzip_helpers.core.compression", "ERROR"):
            self.assertIs(compress(None, FALLBACK), FALLBACK)

    def test_injected_logger_receives_error(self) -> None:
        log = logging.getLogger("tests.injected")
        with self.assertLogs(log, "ERROR") as logs:
            compress(None, FALLBACK, log=log)
        self.assertEqual(len(logs.records), 1)
        self.assertIsNotNone(logs.records[0].exc_info)


class TestDecompressIfNeeded(unittest.TestCase):
    def test_plain_input_is_returned_unchanged(self) -> None:
        data = b"plain text"
        self.assertIs(decompress_if_needed(data, FALLBACK), data)

    def test_none_is_returned_unchanged(self) -> None:
        self.assertIsNone(decompress_if_needed(None, FALLBACK))

    def test_multiple_members(self) -> None:
        data = gzip.compress(b"hello ") + gzip.compress(b"world")
        self.assertEqual(decompress_if_needed(data, FALLBACK), b"hello world")

    def test_trailing_bytes_after_member_are_ignored(self) -> None:
        data = gzip.compress(b"hello") + b"XYZ"
        self.assertEqual(decompress_if_needed(data, FALLBACK), b"hello")

    def test_trailing_bytes_after_several_members_are_ignored(self) -> None:
        data = gzip.compress(b"a") + gzip.compress(b"b") + b"\x00\x00\x00"
        self.assertEqual(decompress_if_needed(data, FALLBACK), b"ab")

    def test_corrupt_input_returns_fallback(self) -> None:
        with self.assertLogs("gzip_helpers.core.compression", "ERROR"):
            result = decompress_if_needed(b"\x1f\x8bgarbage", FALLBACK)
        self.assertIs(result, FALLBACK)

    def test_truncated_input_returns_fallback(self) -> None:
        packed = gzip.compress(b"hello world" * 100)
        with self.assertLogs("gzip_helpers.core.compression", "ERROR"):
            self.assertIs(decompress_if_needed(packed[:-12], FALLBACK), FALLBACK)


class TestMemberDecoder(unittest.TestCase):
    def test_byte_at_a_time(self) -> None:
        data = gzip.compress(b"hello ") + gzip.compress(b"world")
        decoder = MemberDecoder()
        output = b"".join(decoder.decompress(data[i:i + 1]) for i in range(len(data)))
        decoder.check_complete()
        self.assertEqual(output, b"hello world")
        self.assertFalse(decoder.finished)

    def test_non_gzip_tail_finishes_decoding(self) -> None:
        decoder = MemberDecoder()
        self.assertEqual(decoder.decompress(gzip.compress(b"hi")), b"hi")
        self.assertEqual(decoder.decompress(b"junk"), b"")
        self.assertTrue(decoder.finished)
        self.assertEqual(decoder.decompress(gzip.compress(b"more")), b"")
        decoder.check_complete()

    def test_truncated_member_is_incomplete(self) -> None:
        decoder = MemberDecoder()
        decoder.decompress(gzip.compress(b"hello world")[:-4])
        self.assertFalse(decoder.eof)
        with self.assertRaises(CompressionError):
            decoder.check_complete()

    def test_corrupt_header_raises_os_error(self) -> None:
        with self.assertRaises(OSError):
            MemberDecoder().decompress(b"\x1f\x8b\x00" + b"\x00" * 20)


class TestEncoder(unittest.TestCase):
    def test_fastest_level_output_is_standard_gzip(self) -> None:
        data = b"fast " * 1000
        sink = io.BytesIO()
        with open_encoder(sink, level=CompressionLevel.FASTEST) as encoder:
            encoder.write(data[:100])
            encoder.write(data[100:])
        self.assertFalse(sink.closed)
        self.assertEqual(gzip.decompress(sink.getvalue()), data)

    def test_header_mtime_is_zero(self) -> None:
        sink = io.BytesIO()
        with open_encoder(sink) as encoder:
            encoder.write(b"hello")
        self.assertEqual(sink.getvalue()[4:8], b"\x00\x00\x00\x00")

    def test_level_from_name(self) -> None:
        self.assertIs(CompressionLevel.from_name(" Fastest "), CompressionLevel.FASTEST)
        self.assertEqual(CompressionLevel.DEFAULT, zlib.Z_DEFAULT_COMPRESSION)
        with self.assertRaises(ValueError):
            CompressionLevel.from_name("turbo")


if __name__ == "__main__":
    unittest.main()
