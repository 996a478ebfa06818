"""
Unit tests for the privilege message codec.
"""

import struct

import pytest

from rtctoken.errors import EncodingError
from rtctoken.message import (
    Privilege,
    PrivilegeMessage,
    decode_message,
    encode_message,
)


class TestEncodeMessage:
    """Tests for encode_message()."""

    def test_single_join_privilege(self):
        """One entry encodes to count + (uint16, uint32), big-endian."""
        data = encode_message({Privilege.JOIN_CHANNEL: 1700000000})
        assert data == b"\x00\x01" + b"\x00\x01" + struct.pack(">I", 1700000000)
        assert len(data) == 8

    def test_empty_mapping(self):
        """Empty mapping encodes to a zero count."""
        assert encode_message({}) == b"\x00\x00"

    def test_preserves_insertion_order(self):
        """Entries are written in insertion order, not sorted."""
        data = encode_message({3: 30, 1: 10, 2: 20})
        assert decode_message(data) == {3: 30, 1: 10, 2: 20}
        assert list(decode_message(data)) == [3, 1, 2]

    def test_accepts_pairs(self):
        """An iterable of pairs is accepted as well as a mapping."""
        assert encode_message([(1, 5), (2, 6)]) == encode_message({1: 5, 2: 6})

    def test_max_field_values(self):
        """Largest code and timestamp fit exactly."""
        data = encode_message({0xFFFF: 0xFFFFFFFF})
        assert data == b"\x00\x01\xff\xff\xff\xff\xff\xff"

    def test_code_too_large(self):
        """A code above 65535 raises EncodingError."""
        with pytest.raises(EncodingError):
            encode_message({0x10000: 1})

    def test_expiry_too_large(self):
        """An expiry above 2**32-1 raises EncodingError."""
        with pytest.raises(EncodingError):
            encode_message({1: 0x100000000})

    def test_negative_expiry(self):
        """A negative expiry raises EncodingError."""
        with pytest.raises(EncodingError):
            encode_message({1: -1})

    def test_too_many_entries(self):
        """More than 65535 entries raises EncodingError."""
        with pytest.raises(EncodingError, match="Too many"):
            encode_message([(1, 1)] * 0x10000)


class TestDecodeMessage:
    """Tests for decode_message() and PrivilegeMessage.unpack()."""

    @pytest.mark.parametrize("n", [0, 1, 7, 100])
    def test_round_trip(self, n):
        """Decoding an encoded message gives back the same ordered mapping."""
        original = {code: 1700000000 + code * 17 for code in range(n, 0, -1)}
        decoded = decode_message(encode_message(original))
        assert decoded == original
        assert list(decoded) == list(original)

    def test_truncated_entries_are_dropped(self):
        """Entries that do not fit are skipped without error."""
        data = encode_message({1: 100, 2: 200})[:-3]
        message = PrivilegeMessage.unpack(data)
        assert message.items == [(1, 100)]
        assert message.count == 2
        assert message.truncated is True

    def test_missing_header(self):
        """Fewer than two bytes decodes to an empty message."""
        message = PrivilegeMessage.unpack(b"\x00")
        assert message.items == []
        assert message.declared_count is None
        assert message.truncated is False

    def test_trailing_bytes_ignored(self):
        """Bytes after the declared entries are ignored."""
        data = encode_message({1: 100}) + b"\xde\xad"
        assert decode_message(data) == {1: 100}

    def test_pack_round_trip(self):
        """PrivilegeMessage.pack() is the inverse of unpack()."""
        message = PrivilegeMessage(items=[(1, 100), (4, 400)])
        assert PrivilegeMessage.unpack(message.pack()).items == [(1, 100), (4, 400)]
