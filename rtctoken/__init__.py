"""
RTC Token - short-lived channel join tokens.

This package issues "006" access tokens (HMAC-SHA256 signed, base64 wire form)
that grant a uid the right to join a named real-time channel until an expiry
timestamp, and decodes them again for inspection.
"""

__version__ = "1.0.0"

# Codec
from .checksum import crc32
from .message import Privilege, PrivilegeMessage, encode_message, decode_message
from .identity import NumericIdentity, TextIdentity, parse_identity
from .builder import AccessToken, VERSION
from .issuer import Role, issue, issue_rtm, token_mode
from .inspector import TokenView, inspect

# Errors
from .errors import (
    TokenError,
    MissingAppId,
    InvalidAppId,
    IdentityOverflow,
    EncodingError,
    MalformedToken,
)


# HTTP service (lazy import to avoid loading FastAPI for codec-only use)
def __getattr__(name):
    """Lazy loading of the HTTP service."""
    if name == "app":
        from .server import app

        return app
    raise AttributeError(f"module 'rtctoken' has no attribute '{name}'")


__all__ = [
    "__version__",
    # Codec
    "crc32",
    "Privilege",
    "PrivilegeMessage",
    "encode_message",
    "decode_message",
    "NumericIdentity",
    "TextIdentity",
    "parse_identity",
    "AccessToken",
    "VERSION",
    "Role",
    "issue",
    "issue_rtm",
    "token_mode",
    "TokenView",
    "inspect",
    # Errors
    "TokenError",
    "MissingAppId",
    "InvalidAppId",
    "IdentityOverflow",
    "EncodingError",
    "MalformedToken",
    # HTTP service (lazy loaded)
    "app",
]
