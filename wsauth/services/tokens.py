"""Sign-in tokens — short-lived HS256 JWTs binding a token to a user id.

Tokens are stateless: validity is bounded by signature and expiry only.
There is no jti store, so a token can be replayed until it expires.
"""

from __future__ import annotations

import logging
import time
from uuid import UUID

import jwt

from wsauth.errors import TokenError, TokenErrorKind
from wsauth.settings import Settings, get_settings

logger = logging.getLogger(__name__)

TOKEN_TYPE = "email_signin"
_ALGORITHM = "HS256"


class TokenService:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def issue(self, user_id: UUID) -> str:
        """Create a signed sign-in token for ``user_id``."""
        now = int(time.time())
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + self.settings.auth_email_signin_expiry,
            "type": TOKEN_TYPE,
        }
        return jwt.encode(payload, self.settings.auth_secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> UUID:
        """Return the user id a token was issued for.

        Raises TokenError with kind expired, signature_invalid or malformed.
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.auth_secret_key,
                algorithms=[_ALGORITHM],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenError(TokenErrorKind.EXPIRED) from e
        except jwt.InvalidSignatureError as e:
            raise TokenError(TokenErrorKind.SIGNATURE_INVALID) from e
        except jwt.PyJWTError as e:
            raise TokenError(TokenErrorKind.MALFORMED, str(e)) from e

        # Session access tokens share the secret; they must not pass as sign-in tokens
        if payload.get("type") != TOKEN_TYPE:
            raise TokenError(TokenErrorKind.MALFORMED, "not a sign-in token")
        try:
            return UUID(payload["sub"])
        except (ValueError, TypeError, AttributeError) as e:
            raise TokenError(TokenErrorKind.MALFORMED, "subject is not a user id") from e
