"""
Privilege message codec.

A privilege message is an ordered list of (privilege, expire_ts) pairs:

    count:uint16_be, then count x (privilege:uint16_be, expire_ts:uint32_be)

Encoding is strict. Decoding is lenient so inspectors can look at truncated
tokens: entries that do not fit in the remaining bytes are dropped.
"""

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Mapping, Optional, Tuple

from rtctoken.errors import EncodingError

COUNT_FORMAT = ">H"
ENTRY_FORMAT = ">HI"
COUNT_SIZE = struct.calcsize(COUNT_FORMAT)
ENTRY_SIZE = struct.calcsize(ENTRY_FORMAT)

MAX_UINT16 = 0xFFFF
MAX_UINT32 = 0xFFFFFFFF


class Privilege(IntEnum):
    """Privilege codes carried in a token message."""

    JOIN_CHANNEL = 1


@dataclass
class PrivilegeMessage:
    """Decoded privilege message."""

    items: List[Tuple[int, int]] = field(default_factory=list)
    """(privilege, expire_ts) pairs in wire order."""

    declared_count: Optional[int] = None
    """Entry count read from the header; None if the header itself was missing."""

    @property
    def count(self) -> int:
        if self.declared_count is None:
            return len(self.items)
        return self.declared_count

    @property
    def truncated(self) -> bool:
        """True when fewer entries were present than the header declared."""
        return self.declared_count is not None and len(self.items) < self.declared_count

    def as_dict(self) -> Dict[int, int]:
        return dict(self.items)

    def pack(self) -> bytes:
        return encode_message(self.items)

    @classmethod
    def unpack(cls, data: bytes) -> "PrivilegeMessage":
        if len(data) < COUNT_SIZE:
            return cls()

        (count,) = struct.unpack_from(COUNT_FORMAT, data, 0)
        available = (len(data) - COUNT_SIZE) // ENTRY_SIZE
        items = [
            struct.unpack_from(ENTRY_FORMAT, data, COUNT_SIZE + i * ENTRY_SIZE)
            for i in range(min(count, available))
        ]
        return cls(items=items, declared_count=count)


def encode_message(privileges) -> bytes:
    """
    Encode privileges into the binary message format.

    Args:
        privileges: Mapping of privilege code to expiry timestamp, or an
            iterable of (privilege, expire_ts) pairs. Order is preserved.

    Returns:
        The encoded message bytes.

    Raises:
        EncodingError: If the entry count, a code, or a timestamp does not fit
            in its field.
    """
    if isinstance(privileges, Mapping):
        entries = list(privileges.items())
    else:
        entries = list(privileges)

    if len(entries) > MAX_UINT16:
        raise EncodingError(f"Too many privileges: {len(entries)} > {MAX_UINT16}")

    parts = [struct.pack(COUNT_FORMAT, len(entries))]
    for privilege, expire_ts in entries:
        privilege = int(privilege)
        expire_ts = int(expire_ts)
        if not 0 <= privilege <= MAX_UINT16:
            raise EncodingError(f"Privilege code out of range: {privilege}")
        if not 0 <= expire_ts <= MAX_UINT32:
            raise EncodingError(f"Expire timestamp out of range: {expire_ts}")
        parts.append(struct.pack(ENTRY_FORMAT, privilege, expire_ts))

    return b"".join(parts)


def decode_message(data: bytes) -> Dict[int, int]:
    """Decode a message into an ordered privilege -> expire_ts mapping."""
    return PrivilegeMessage.unpack(data).as_dict()
