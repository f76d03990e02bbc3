"""Tests for the save container codec."""

from __future__ import annotations

import struct
import unittest
import zlib

from save_fixer.core.checksum import adler32
from save_fixer.core.container import (
    decode_container,
    encode_container,
    inspect_container,
    pack,
    unpack,
)
from save_fixer.utils import DecompressionError, EncodingError, TooSmallError

SAMPLE_JSON = '{"itemData":{"Mass":{"entities":{"(ID=1)":{"name":"entity"}}}}}'


def _raw_deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(9, zlib.DEFLATED, -zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def _wrap(data: bytes) -> bytes:
    return (
        struct.pack("<I", len(data))
        + b"\x78\x9c"
        + _raw_deflate(data)
        + struct.pack(">I", adler32(data))
    )


class TestPack(unittest.TestCase):
    def test_layout(self) -> None:
        data = pack(SAMPLE_JSON)
        json_bytes = SAMPLE_JSON.encode("utf-8")

        self.assertEqual(struct.unpack("<I", data[:4])[0], len(json_bytes))
        self.assertEqual(data[4:6], b"\x78\x9c")
        self.assertEqual(struct.unpack(">I", data[-4:])[0], adler32(json_bytes))
        self.assertEqual(data[6:-4], _raw_deflate(json_bytes))

    def test_output_is_a_valid_zlib_stream(self) -> None:
        data = pack(SAMPLE_JSON)
        self.assertEqual(zlib.decompress(data[4:]).decode("utf-8"), SAMPLE_JSON)

    def test_size_header_counts_utf8_bytes(self) -> None:
        text = '{"name":"Drohne ✓ 日本"}'
        data = pack(text)
        self.assertEqual(struct.unpack("<I", data[:4])[0], len(text.encode("utf-8")))
        self.assertNotEqual(len(text), len(text.encode("utf-8")))

    def test_aliases(self) -> None:
        self.assertIs(encode_container, pack)
        self.assertIs(decode_container, unpack)


class TestUnpack(unittest.TestCase):
    def test_round_trip(self) -> None:
        for text in (SAMPLE_JSON, "", '{"name":"Drohne ✓ 日本"}', "[" + "1," * 5000 + "1]"):
            self.assertEqual(unpack(pack(text)), text)

    def test_round_trip_with_low_compression(self) -> None:
        self.assertEqual(unpack(pack(SAMPLE_JSON, compresslevel=1)), SAMPLE_JSON)

    def test_too_small(self) -> None:
        for data in (b"", b"\x01", b"\x01\x02\x03"):
            with self.assertRaises(TooSmallError):
                unpack(data)

    def test_reads_zlib_compress_output(self) -> None:
        json_bytes = SAMPLE_JSON.encode("utf-8")
        data = struct.pack("<I", len(json_bytes)) + zlib.compress(json_bytes)
        self.assertEqual(unpack(data), SAMPLE_JSON)

    def test_reads_legacy_raw_deflate(self) -> None:
        json_bytes = SAMPLE_JSON.encode("utf-8")
        data = struct.pack("<I", len(json_bytes)) + _raw_deflate(json_bytes)
        self.assertEqual(unpack(data), SAMPLE_JSON)

    def test_size_header_is_not_validated(self) -> None:
        data = bytearray(pack(SAMPLE_JSON))
        data[:4] = struct.pack("<I", 7)
        self.assertEqual(unpack(bytes(data)), SAMPLE_JSON)

    def test_checksum_mismatch_only_warns(self) -> None:
        data = bytearray(pack(SAMPLE_JSON))
        data[-4:] = b"\x00\x00\x00\x00"
        with self.assertLogs("save_fixer.core.container", level="WARNING"):
            self.assertEqual(unpack(bytes(data)), SAMPLE_JSON)

    def test_corrupt_stream(self) -> None:
        data = struct.pack("<I", 10) + b"\x78\x9c" + b"garbage!!" + b"\x00" * 4
        with self.assertRaises(DecompressionError):
            unpack(data)

    def test_truncated_stream(self) -> None:
        text = '{"values":[' + ",".join(str(i) for i in range(2000)) + "]}"
        data = pack(text)
        with self.assertRaises(DecompressionError):
            unpack(data[:len(data) // 2])

    def test_empty_payload(self) -> None:
        with self.assertRaises(DecompressionError):
            unpack(b"\x00\x00\x00\x00")

    def test_invalid_utf8(self) -> None:
        with self.assertRaises(EncodingError):
            unpack(_wrap(b"\xff\xfe\xfa"))


class TestInspect(unittest.TestCase):
    def test_packed_container(self) -> None:
        data = pack(SAMPLE_JSON)
        info = inspect_container(data)
        json_bytes = SAMPLE_JSON.encode("utf-8")

        self.assertTrue(info.zlib_wrapped)
        self.assertEqual(info.size_hint, len(json_bytes))
        self.assertEqual(info.decompressed_size, len(json_bytes))
        self.assertEqual(info.payload_size, len(data) - 4)
        self.assertTrue(info.size_matches)
        self.assertTrue(info.checksum_ok)

    def test_legacy_container_has_no_trailer(self) -> None:
        json_bytes = SAMPLE_JSON.encode("utf-8")
        info = inspect_container(struct.pack("<I", 3) + _raw_deflate(json_bytes))

        self.assertFalse(info.zlib_wrapped)
        self.assertIsNone(info.stored_checksum)
        self.assertIsNone(info.checksum_ok)
        self.assertFalse(info.size_matches)


if __name__ == "__main__":
    unittest.main()
