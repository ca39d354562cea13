"""Error taxonomy for the sign-in flow.

Only conditions callers must treat as failures are exceptions. Expected
branches (rate limited, forwarded to SSO, suspended, ...) are returned as
tagged variants from ``services.decisions`` / ``services.callback``.
"""

from __future__ import annotations

from enum import Enum


class WsAuthError(Exception):
    """Base error rendered by the API exception handler."""

    status: int = 500
    error: str = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or self.error)
        self.message = str(self)


class InputError(WsAuthError):
    """Missing or malformed input."""

    status = 400
    error = "validation_error"


class AuthorizationError(WsAuthError):
    """Authorization error"""

    status = 403
    error = "authorization_error"


class TokenErrorKind(str, Enum):
    MALFORMED = "malformed"
    EXPIRED = "expired"
    SIGNATURE_INVALID = "signature_invalid"


class TokenError(WsAuthError):
    """Invalid sign-in token."""

    status = 401
    error = "invalid_token"

    def __init__(self, kind: TokenErrorKind, message: str = ""):
        super().__init__(message or f"sign-in token {kind.value}")
        self.kind = kind
