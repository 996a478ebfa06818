"""
Token inspector - structural decoder for wire-form tokens.

Reconstructs the content block fields without the app certificate. It does not
authenticate a token; it shows what a token claims and can check those claims
against a known app id, channel and uid.
"""

from __future__ import annotations

import base64
import binascii
import logging
import struct
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rtctoken.builder import (
    APP_ID_OFFSET,
    CHANNEL_CRC_OFFSET,
    HEADER_SIZE,
    MESSAGE_OFFSET,
    SIGNATURE_OFFSET,
    SIGNATURE_SIZE,
    UID_CRC_OFFSET,
    VERSION,
    decode_app_id,
)
from rtctoken.checksum import crc32
from rtctoken.errors import MalformedToken, TokenError
from rtctoken.identity import parse_identity
from rtctoken.message import Privilege, PrivilegeMessage

logger = logging.getLogger(__name__)


def _printable(data: bytes) -> str:
    return "".join(chr(b) if 32 <= b < 127 else "." for b in data)


@dataclass
class TokenView:
    """Decoded fields of a token."""

    version: str
    """Version prefix ("006"), or "" if the token had none."""

    base64_length: int
    """Length of the base64 portion of the token."""

    raw: bytes = b""
    signature: bytes = b""
    app_id: bytes = b""
    channel_crc: Optional[int] = None
    uid_crc: Optional[int] = None
    message: PrivilegeMessage = field(default_factory=PrivilegeMessage)

    error: Optional[str] = None
    """Set only by best-effort inspection of a malformed token."""

    @property
    def signature_hex(self) -> str:
        return self.signature.hex()

    @property
    def app_id_hex(self) -> str:
        return self.app_id.hex()

    @property
    def app_id_ascii(self) -> str:
        return _printable(self.app_id)

    @property
    def raw_hex(self) -> str:
        return self.raw.hex()

    def privilege_expire_ts(self, privilege: int = Privilege.JOIN_CHANNEL) -> Optional[int]:
        """Expiry of a privilege, or None if the token does not carry it."""
        for code, expire_ts in self.message.items:
            if code == privilege:
                return expire_ts
        return None

    def is_expired(self, now: Optional[float] = None) -> bool:
        """True if the join privilege is missing or already expired."""
        expire_ts = self.privilege_expire_ts()
        if expire_ts is None:
            return True
        if now is None:
            now = time.time()
        return now >= expire_ts

    def mismatches(
        self,
        app_id: Optional[str] = None,
        channel: Optional[str] = None,
        identity: Any = None,
    ) -> List[str]:
        """
        Compare the token's visible fields against expected values.

        Only the arguments that are given are checked. This re-derives the
        app id bytes and CRCs; it cannot check the signature.

        Returns:
            Names of the fields that do not match (empty if all match).
        """
        mismatched = []
        if app_id is not None:
            try:
                if decode_app_id(app_id) != self.app_id:
                    mismatched.append("appId")
            except TokenError:
                mismatched.append("appId")
        if channel is not None and crc32(channel.encode("utf-8")) != self.channel_crc:
            mismatched.append("channelCrc")
        if identity is not None:
            try:
                uid_crc = crc32(parse_identity(identity).to_checksum_bytes())
            except TokenError:
                uid_crc = None
            if uid_crc != self.uid_crc:
                mismatched.append("uidCrc")
        return mismatched

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready view using the inspector's wire field names."""
        result: Dict[str, Any] = {
            "tokenVersion": self.version,
            "tokenBase64Length": self.base64_length,
            "signatureHex": self.signature_hex,
            "appIdHex": self.app_id_hex,
            "appIdAscii": self.app_id_ascii,
            "channelCrc": self.channel_crc,
            "uidCrc": self.uid_crc,
            "message": {
                "count": self.message.count,
                "items": [
                    {"privilege": privilege, "expireTs": expire_ts}
                    for privilege, expire_ts in self.message.items
                ],
            },
            "rawHex": self.raw_hex,
        }
        if self.error:
            result["error"] = self.error
        return result


def split_token(token: str):
    """Split a token into (version, base64 payload). The version is optional."""
    token = (token or "").strip()
    if token.startswith(VERSION):
        return VERSION, token[len(VERSION):]
    return "", token


def decode_content(payload: str) -> bytes:
    """
    Strictly base64-decode a token payload. Missing padding is tolerated.

    Raises:
        MalformedToken: If the payload is not valid base64.
    """
    padded = payload + "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedToken(f"Token is not valid base64: {e}")


def inspect(token: str, best_effort: bool = False) -> TokenView:
    """
    Decode a wire-form token into its fields.

    Args:
        token: The token string, with or without the "006" prefix.
        best_effort: Return a partial view (with `error` set) instead of
            raising when the token is malformed.

    Returns:
        A TokenView of the decoded content block.

    Raises:
        MalformedToken: If the token is not base64 or is shorter than the
            56-byte fixed header, unless best_effort is set.
    """
    version, payload = split_token(token)
    view = TokenView(version=version, base64_length=len(payload))

    try:
        raw = decode_content(payload)
        view.raw = raw
        if len(raw) < HEADER_SIZE:
            raise MalformedToken(
                f"Token content is {len(raw)} bytes, expected at least {HEADER_SIZE}"
            )
    except MalformedToken as e:
        if not best_effort:
            raise
        logger.debug(f"Best-effort inspection of malformed token: {e}")
        view.error = str(e)
        _fill_partial(view)
        return view

    view.signature = raw[SIGNATURE_OFFSET:SIGNATURE_OFFSET + SIGNATURE_SIZE]
    view.app_id = raw[APP_ID_OFFSET:CHANNEL_CRC_OFFSET]
    view.channel_crc, view.uid_crc = struct.unpack_from(">II", raw, CHANNEL_CRC_OFFSET)
    view.message = PrivilegeMessage.unpack(raw[MESSAGE_OFFSET:])

    if view.message.truncated:
        logger.debug(
            f"Privilege message truncated: declared {view.message.declared_count}, "
            f"read {len(view.message.items)}"
        )
    return view


def _fill_partial(view: TokenView) -> None:
    """Populate whatever fixed fields fit in a short content block."""
    raw = view.raw
    view.signature = raw[SIGNATURE_OFFSET:SIGNATURE_OFFSET + SIGNATURE_SIZE]
    view.app_id = raw[APP_ID_OFFSET:CHANNEL_CRC_OFFSET]
    if len(raw) >= CHANNEL_CRC_OFFSET + 4:
        (view.channel_crc,) = struct.unpack_from(">I", raw, CHANNEL_CRC_OFFSET)
    if len(raw) >= UID_CRC_OFFSET + 4:
        (view.uid_crc,) = struct.unpack_from(">I", raw, UID_CRC_OFFSET)
