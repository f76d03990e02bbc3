"""Encoding and decoding of the save container format.

A container is a little-endian u32 holding the JSON byte length, followed by
a zlib stream: ``0x78 0x9C``, a raw deflate stream and the big-endian
Adler-32 of the uncompressed JSON bytes.
"""

import logging
import struct
import zlib
from typing import NamedTuple, Optional

from ..common.constants import DEFAULT_COMPRESSION_LEVEL, ZLIB_HEADER, ZLIB_MARKER
from ..common.types import ContainerInfo
from ..utils import DecompressionError, EncodingError, TooSmallError
from .checksum import adler32

logger = logging.getLogger(__name__)

SIZE_HEADER = struct.Struct("<I")
CHECKSUM_TRAILER = struct.Struct(">I")


class _Payload(NamedTuple):
    size_hint: int
    payload_size: int
    deflate_data: bytes
    zlib_wrapped: bool
    stored_checksum: Optional[int]


def _split(data: bytes) -> _Payload:
    if len(data) < SIZE_HEADER.size:
        raise TooSmallError(
            f"Save data is too small ({len(data)} bytes). "
            "Expected at least 4 bytes for the JSON size header."
        )

    (size_hint,) = SIZE_HEADER.unpack_from(data, 0)
    payload = data[SIZE_HEADER.size:]

    if len(payload) >= 2 and payload[0] == ZLIB_MARKER:
        stored_checksum = None
        if len(payload) >= len(ZLIB_HEADER) + CHECKSUM_TRAILER.size:
            (stored_checksum,) = CHECKSUM_TRAILER.unpack(
                payload[-CHECKSUM_TRAILER.size:])
        deflate_data = payload[len(ZLIB_HEADER):-CHECKSUM_TRAILER.size]
        return _Payload(size_hint, len(payload), deflate_data, True, stored_checksum)

    return _Payload(size_hint, len(payload), payload, False, None)


def _inflate(data: bytes) -> bytes:
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        inflated = decompressor.decompress(data)
        inflated += decompressor.flush()
    except zlib.error as exc:
        raise DecompressionError(
            "Decompression failed. Save data may be corrupted."
        ) from exc
    if not decompressor.eof:
        raise DecompressionError(
            "Decompression failed. Deflate stream is truncated."
        )
    return inflated


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EncodingError(
            f"Decompressed save data is not valid UTF-8: {exc.reason}"
        ) from exc


def unpack(data: bytes) -> str:
    """
    Decode a save container into its JSON text.

    The size header is informational only; the deflate stream ends decoding.
    Payloads that do not start with the zlib marker are inflated as raw
    deflate data.

    Args:
        data: Container bytes

    Returns:
        JSON text

    Raises:
        TooSmallError: If data is shorter than the size header
        DecompressionError: If the deflate stream is corrupt or truncated
        EncodingError: If the inflated bytes are not UTF-8
    """
    parts = _split(data)
    inflated = _inflate(parts.deflate_data)

    if parts.size_hint != len(inflated):
        logger.debug(
            "Size header says %s bytes, inflated %s bytes",
            parts.size_hint,
            len(inflated),
        )
    if parts.stored_checksum is not None:
        checksum = adler32(inflated)
        if parts.stored_checksum != checksum:
            logger.warning(
                "Adler-32 trailer mismatch (stored %08x, computed %08x)",
                parts.stored_checksum,
                checksum,
            )

    return _decode_text(inflated)


def pack(text: str, compresslevel: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """
    Encode JSON text into a save container.

    Args:
        text: JSON text
        compresslevel: Deflate level (0-9, 9 is maximum compression)

    Returns:
        Container bytes
    """
    json_bytes = text.encode("utf-8")

    compressor = zlib.compressobj(compresslevel, zlib.DEFLATED, -zlib.MAX_WBITS)
    deflated = compressor.compress(json_bytes) + compressor.flush()

    return b"".join(
        (
            SIZE_HEADER.pack(len(json_bytes)),
            ZLIB_HEADER,
            deflated,
            CHECKSUM_TRAILER.pack(adler32(json_bytes)),
        )
    )


def inspect_container(data: bytes) -> ContainerInfo:
    """
    Describe the header, payload and trailer of a save container.

    Args:
        data: Container bytes

    Returns:
        ContainerInfo for the container

    Raises:
        TooSmallError: If data is shorter than the size header
        DecompressionError: If the deflate stream is corrupt or truncated
    """
    parts = _split(data)
    inflated = _inflate(parts.deflate_data)
    return ContainerInfo(
        size_hint=parts.size_hint,
        payload_size=parts.payload_size,
        zlib_wrapped=parts.zlib_wrapped,
        decompressed_size=len(inflated),
        checksum=adler32(inflated),
        stored_checksum=parts.stored_checksum,
    )


decode_container = unpack
encode_container = pack
