"""
Token builder - signs and lays out the binary content block.

Content block layout (all integers big-endian):

    offset  length  field
    0       32      HMAC-SHA256 signature
    32      16      app id (raw bytes decoded from hex)
    48      4       CRC-32 of the channel name
    52      4       CRC-32 of the uid text
    56      ...     privilege message

The signature covers appId || channel || uid || salt || ts || message. Salt
and timestamp are not stored in the block, so two builds over the same inputs
produce different signatures over identical visible fields.
"""

import base64
import logging
import secrets
import struct
import time
from typing import Optional, Union

from cryptography.hazmat.primitives import hashes, hmac

from rtctoken.checksum import crc32
from rtctoken.errors import InvalidAppId
from rtctoken.identity import parse_identity
from rtctoken.message import Privilege, encode_message

logger = logging.getLogger(__name__)

VERSION = "006"

SIGNATURE_SIZE = 32
APP_ID_SIZE = 16
CRC_SIZE = 4
HEADER_SIZE = SIGNATURE_SIZE + APP_ID_SIZE + 2 * CRC_SIZE  # 56

SIGNATURE_OFFSET = 0
APP_ID_OFFSET = SIGNATURE_SIZE
CHANNEL_CRC_OFFSET = APP_ID_OFFSET + APP_ID_SIZE
UID_CRC_OFFSET = CHANNEL_CRC_OFFSET + CRC_SIZE
MESSAGE_OFFSET = HEADER_SIZE


def decode_app_id(app_id: str) -> bytes:
    """
    Decode a hex app id (hyphens allowed) into its 16 raw bytes.

    Raises:
        InvalidAppId: If the app id is empty, not hex, or not 16 bytes long.
    """
    if not app_id:
        raise InvalidAppId("App ID is empty")

    app_id_hex = str(app_id).replace("-", "")
    if len(app_id_hex) != APP_ID_SIZE * 2:
        raise InvalidAppId(
            f"App ID must be {APP_ID_SIZE * 2} hex characters, got {len(app_id_hex)}"
        )
    try:
        return bytes.fromhex(app_id_hex)
    except ValueError:
        raise InvalidAppId(f"App ID is not valid hex: {app_id!r}")


def sign(app_certificate: bytes, message: bytes) -> bytes:
    """HMAC-SHA256 of `message` keyed with the app certificate."""
    mac = hmac.HMAC(app_certificate, hashes.SHA256())
    mac.update(message)
    return mac.finalize()


class AccessToken:
    """
    Builds signed channel access tokens for one app.

    Example:
        >>> builder = AccessToken(app_id="4a410e05...", app_certificate="02f98182...")
        >>> token = builder.build_token("my-channel", 12345, int(time.time()) + 3600)
    """

    def __init__(self, app_id: str, app_certificate: Union[str, bytes]):
        """
        Initialize the builder with app credentials.

        Args:
            app_id: 32 hex characters, hyphens ignored.
            app_certificate: Signing secret. Strings are UTF-8 encoded.

        Raises:
            InvalidAppId: If app_id is malformed.
            ValueError: If app_certificate is empty.
        """
        if not app_certificate:
            raise ValueError("AccessToken requires 'app_certificate'")

        self.app_id = app_id
        self.version = VERSION
        self._app_id_bytes = decode_app_id(app_id)
        if isinstance(app_certificate, str):
            app_certificate = app_certificate.encode("utf-8")
        self._certificate = app_certificate

    def build(
        self,
        channel: str,
        identity,
        privilege_expire_ts: int,
        salt: Optional[int] = None,
        issued_at: Optional[int] = None,
    ) -> bytes:
        """
        Build the binary content block.

        Args:
            channel: Channel name.
            identity: Numeric uid or user account (see rtctoken.identity).
            privilege_expire_ts: Join privilege expiry, epoch seconds.
            salt: Signature salt. Drawn from the OS CSPRNG when omitted.
            issued_at: Signature timestamp. Current time when omitted.

        Returns:
            The content block bytes (56 bytes plus the privilege message).
        """
        uid = parse_identity(identity)
        channel_bytes = (channel or "").encode("utf-8")

        if salt is None:
            salt = secrets.randbits(32)
        if issued_at is None:
            issued_at = int(time.time())

        message = encode_message({Privilege.JOIN_CHANNEL: privilege_expire_ts})

        sign_input = b"".join(
            [
                self._app_id_bytes,
                channel_bytes,
                uid.to_signature_bytes(),
                struct.pack(">II", salt, issued_at),
                message,
            ]
        )
        signature = sign(self._certificate, sign_input)

        channel_crc = crc32(channel_bytes)
        uid_crc = crc32(uid.to_checksum_bytes())

        logger.debug(
            f"Built token content: channel_crc={channel_crc} uid_crc={uid_crc} "
            f"expire_ts={privilege_expire_ts}"
        )

        return b"".join(
            [
                signature,
                self._app_id_bytes,
                struct.pack(">II", channel_crc, uid_crc),
                message,
            ]
        )

    def build_token(self, channel: str, identity, privilege_expire_ts: int, **kwargs) -> str:
        """Build the content block and return it in wire form."""
        return encode_token(self.build(channel, identity, privilege_expire_ts, **kwargs), self.version)


def encode_token(content: bytes, version: str = VERSION) -> str:
    """Prefix the version tag to the base64 encoded content block."""
    return version + base64.b64encode(content).decode("ascii")
