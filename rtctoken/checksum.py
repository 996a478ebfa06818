"""
CRC-32 checksum used for the channel and uid fields of a token.

Reflected polynomial 0xEDB88320, seeded with all ones and complemented at the
end (the same result as zlib.crc32). The lookup table is built once at import
and never mutated.
"""

from typing import Tuple

POLYNOMIAL = 0xEDB88320


def _make_table() -> Tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = (POLYNOMIAL ^ (c >> 1)) if c & 1 else (c >> 1)
        table.append(c)
    return tuple(table)


CRC_TABLE: Tuple[int, ...] = _make_table()


def crc32(data: bytes) -> int:
    """
    Compute the CRC-32 of a byte sequence.

    Args:
        data: Bytes to checksum. Empty input is valid and yields 0.

    Returns:
        Unsigned 32-bit checksum.
    """
    crc = 0xFFFFFFFF
    for byte in data:
        crc = (crc >> 8) ^ CRC_TABLE[(crc ^ byte) & 0xFF]
    return crc ^ 0xFFFFFFFF
