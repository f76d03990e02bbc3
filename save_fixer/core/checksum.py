"""Adler-32 checksum used in the zlib trailer of save containers."""

import zlib

MOD_ADLER = 65521


def adler32(data: bytes, value: int = 1) -> int:
    """
    Compute the Adler-32 checksum of data.

    Two sums start at a=1, b=0; for every byte a = (a + byte) mod 65521 and
    b = (b + a) mod 65521. The result is (b << 16) | a.

    Args:
        data: Bytes to checksum
        value: Running checksum to continue from (1 starts a new one)

    Returns:
        Unsigned 32-bit checksum
    """
    return zlib.adler32(data, value) & 0xFFFFFFFF
