"""
Exceptions raised by the token codec.

Tokenless mode (no certificate configured) is not an error and never raises.
"""


class TokenError(Exception):
    """Base exception for token codec errors."""

    pass


class MissingAppId(TokenError):
    """Raised when no application identifier was supplied."""

    def __init__(self, message: str = "App ID is required"):
        super().__init__(message)


class InvalidAppId(TokenError):
    """Raised when the application identifier is not 32 hex characters."""

    def __init__(self, message: str = "App ID must be 32 hex characters"):
        super().__init__(message)


class IdentityOverflow(TokenError):
    """Raised when a numeric identity does not fit in 32 bits."""

    def __init__(self, message: str = "Numeric uid exceeds 32-bit unsigned range"):
        super().__init__(message)


class EncodingError(TokenError):
    """Raised when a privilege message exceeds its field widths."""

    def __init__(self, message: str = "Privilege message exceeds field widths"):
        super().__init__(message)


class MalformedToken(TokenError):
    """Raised when a token cannot be decoded into a content block."""

    def __init__(self, message: str = "Malformed token"):
        super().__init__(message)
