# rtctoken/config.py
"""
Centralized configuration for the token service.

All configurable values are read from environment variables with sensible
defaults, so different deployments can use different credentials without code
changes.

Usage:
    from rtctoken import config

    token = issue(config.APP_ID, config.APP_CERTIFICATE, channel, uid)

Environment Variables:
    AGORA_APP_ID: App id, 32 hex characters (required to issue tokens)
    AGORA_APP_CERTIFICATE: App certificate; leave unset for tokenless mode
    RTCTOKEN_DEFAULT_CHANNEL: Channel used when a request names none
    RTCTOKEN_EXPIRE_SECONDS: Token lifetime (default: 3600)
    DEBUG_AGORA: Set to "1" to enable the token inspection endpoints
    RTCTOKEN_HOST / RTCTOKEN_PORT: HTTP bind address (default: 127.0.0.1:5000)
    AGORA_CHAT_APPKEY: Chat app key passed through to clients (or AGORA_APP_KEY)
"""

import os
from typing import Final, Optional

# =============================================================================
# Credentials
# =============================================================================

APP_ID: Final[str] = os.getenv("AGORA_APP_ID", "")

# Empty means tokenless mode, not an error
APP_CERTIFICATE: Final[str] = os.getenv("AGORA_APP_CERTIFICATE", "")

# Not used for signing; handed to clients alongside the token
CHAT_APP_KEY: Final[Optional[str]] = (
    os.getenv("AGORA_CHAT_APPKEY") or os.getenv("AGORA_APP_KEY") or None
)

# =============================================================================
# Token Defaults
# =============================================================================

DEFAULT_CHANNEL: Final[str] = os.getenv("RTCTOKEN_DEFAULT_CHANNEL", "finmentor-channel")

EXPIRE_SECONDS: Final[int] = int(os.getenv("RTCTOKEN_EXPIRE_SECONDS", "3600"))

# =============================================================================
# Server Configuration
# =============================================================================

INSPECT_ENABLED: Final[bool] = os.getenv("DEBUG_AGORA", "") == "1"

HOST: Final[str] = os.getenv("RTCTOKEN_HOST", "127.0.0.1")

PORT: Final[int] = int(os.getenv("RTCTOKEN_PORT", "5000"))


# =============================================================================
# Helper Functions
# =============================================================================


def mask_secret(secret: Optional[str], visible: int = 4) -> str:
    """Mask all but the first few characters of a secret for display."""
    if not secret:
        return "(not set)"
    if len(secret) <= visible:
        return "*" * len(secret)
    return secret[:visible] + "*" * (len(secret) - visible)


def as_dict() -> dict:
    """Current configuration with the certificate masked."""
    return {
        "APP_ID": APP_ID or "(not set)",
        "APP_CERTIFICATE": mask_secret(APP_CERTIFICATE),
        "CHAT_APP_KEY": CHAT_APP_KEY or "(not set)",
        "DEFAULT_CHANNEL": DEFAULT_CHANNEL,
        "EXPIRE_SECONDS": EXPIRE_SECONDS,
        "INSPECT_ENABLED": INSPECT_ENABLED,
        "HOST": HOST,
        "PORT": PORT,
    }


def print_config() -> None:
    """Print current configuration (useful for debugging)."""
    print("Token Service Configuration:")
    for key, value in as_dict().items():
        print(f"  {key + ':':<17} {value}")


if __name__ == "__main__":
    print_config()
