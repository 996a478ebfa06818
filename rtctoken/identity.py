"""
Caller identity normalization.

An identity is either numeric (an RTC uid) or textual (a user account). The
decision is made once, by a strict all-ASCII-digits check on the text form, and
carried through the rest of the pipeline as a typed value.

The two byte encodings deliberately differ for numeric identities: the signed
input carries a 4-byte big-endian integer while the checksum covers the UTF-8
text. Existing tokens depend on this, so the encodings are kept separate.
"""

import re
import struct
from dataclasses import dataclass
from typing import Union

from rtctoken.errors import IdentityOverflow

MAX_UID = 0xFFFFFFFF

_NUMERIC = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class NumericIdentity:
    """A numeric uid. `text` keeps the caller's spelling (e.g. leading zeros)."""

    value: int
    text: str

    def to_signature_bytes(self) -> bytes:
        return struct.pack(">I", self.value)

    def to_checksum_bytes(self) -> bytes:
        return self.text.encode("utf-8")


@dataclass(frozen=True)
class TextIdentity:
    """A textual user account."""

    text: str

    def to_signature_bytes(self) -> bytes:
        return self.text.encode("utf-8")

    def to_checksum_bytes(self) -> bytes:
        return self.text.encode("utf-8")


Identity = Union[NumericIdentity, TextIdentity]


def parse_identity(value) -> Identity:
    """
    Decide whether a caller-supplied identity is numeric or textual.

    Args:
        value: An int, a str, an already parsed identity, or None. None and the
            empty string are treated as uid 0.

    Returns:
        NumericIdentity if the text form is made only of ASCII digits,
        TextIdentity otherwise.

    Raises:
        IdentityOverflow: If a numeric identity exceeds 32 bits unsigned.
    """
    if isinstance(value, (NumericIdentity, TextIdentity)):
        return value

    text = "0" if value is None or value == "" else str(value)

    if not _NUMERIC.fullmatch(text):
        return TextIdentity(text)

    number = int(text)
    if number > MAX_UID:
        raise IdentityOverflow(f"Numeric uid {text} exceeds {MAX_UID}")
    return NumericIdentity(value=number, text=text)


def to_signature_bytes(value) -> bytes:
    """Encoding of an identity inside the HMAC input."""
    return parse_identity(value).to_signature_bytes()


def to_checksum_bytes(value) -> bytes:
    """Encoding of an identity for its CRC-32 field (always UTF-8 text)."""
    return parse_identity(value).to_checksum_bytes()
