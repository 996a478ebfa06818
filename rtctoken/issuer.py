"""
Token issuance - the entry points the surrounding service calls.

`issue` returns None when no app certificate is configured. That is tokenless
mode: the channel accepts unauthenticated joins. Every other failure raises, so
callers can tell "intentionally tokenless" from "build failed".
"""

import logging
import time
from enum import Enum
from typing import Optional, Union

from rtctoken.builder import AccessToken
from rtctoken.errors import MissingAppId

logger = logging.getLogger(__name__)

DEFAULT_EXPIRE_SECONDS = 3600

TOKEN_MODE_SECURE = "secure"
TOKEN_MODE_TOKENLESS = "tokenless"


class Role(str, Enum):
    """
    Requested channel role.

    Accepted for API compatibility; the role is not bound into the signed
    payload. Every token carries the single join-channel privilege.
    """

    PUBLISHER = "publisher"
    SUBSCRIBER = "subscriber"

    @classmethod
    def parse(cls, value: Union[str, "Role", None]) -> "Role":
        if value is None or value == "":
            return cls.PUBLISHER
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.warning(f"Unknown role {value!r}, defaulting to publisher")
            return cls.PUBLISHER


def privilege_expire_ts(expire_seconds: Optional[int] = None, now: Optional[int] = None) -> int:
    """Absolute expiry for a token valid `expire_seconds` from `now`."""
    if now is None:
        now = int(time.time())
    if not expire_seconds:
        expire_seconds = DEFAULT_EXPIRE_SECONDS
    return now + int(expire_seconds)


def issue(
    app_id: Optional[str],
    app_certificate: Optional[Union[str, bytes]],
    channel: str,
    identity,
    role: Union[str, Role, None] = Role.PUBLISHER,
    expire_seconds: Optional[int] = DEFAULT_EXPIRE_SECONDS,
) -> Optional[str]:
    """
    Issue a channel join token.

    Args:
        app_id: 32-hex-character app id.
        app_certificate: Signing secret, or None/empty for tokenless mode.
        channel: Channel name.
        identity: Numeric uid or user account.
        role: "publisher" (default) or "subscriber". Not signed.
        expire_seconds: Token lifetime (default: 1 hour).

    Returns:
        The wire-form token ("006" + base64 content), or None in tokenless mode.

    Raises:
        MissingAppId: If app_id is absent.
        InvalidAppId: If app_id is malformed.
        IdentityOverflow: If a numeric identity exceeds 32 bits.
        EncodingError: If the expiry does not fit in 32 bits.
    """
    if not app_id:
        raise MissingAppId()

    if not app_certificate:
        logger.info("No app certificate configured, issuing in tokenless mode")
        return None

    role = Role.parse(role)
    expire_ts = privilege_expire_ts(expire_seconds)

    builder = AccessToken(app_id, app_certificate)
    token = builder.build_token(channel, identity, expire_ts)

    logger.debug(f"Issued {role.value} token for channel {channel!r}, expires at {expire_ts}")
    return token


def issue_rtm(
    app_id: Optional[str],
    app_certificate: Optional[Union[str, bytes]],
    user_account: str,
    expire_seconds: Optional[int] = DEFAULT_EXPIRE_SECONDS,
) -> Optional[str]:
    """
    Issue a messaging login token for a user account.

    Same format as `issue`, built over an empty channel name.
    """
    if not app_id:
        raise MissingAppId()

    if not app_certificate:
        logger.info("No app certificate configured, issuing in tokenless mode")
        return None

    builder = AccessToken(app_id, app_certificate)
    return builder.build_token("", user_account, privilege_expire_ts(expire_seconds))


def token_mode(token: Optional[str]) -> str:
    """Label a result of `issue` as secure or tokenless."""
    return TOKEN_MODE_SECURE if token else TOKEN_MODE_TOKENLESS
