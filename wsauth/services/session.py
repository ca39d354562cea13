"""Session establishment after a verified sign-in.

``TokenSessionEstablisher`` issues an HS256 access token for the user in the
tenant context; the API layer puts it in an HttpOnly cookie.
"""

from __future__ import annotations

import logging
import time
from typing import Protocol
from uuid import uuid4

import jwt

from wsauth.ontology.types import Tenant, User
from wsauth.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class SessionEstablisher(Protocol):
    async def sign_in(
        self,
        user: User,
        tenant: Tenant,
        method: str,
        *,
        is_new_user: bool = False,
        is_new_tenant: bool = False,
    ) -> dict: ...


class TokenSessionEstablisher:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def create_access_token(self, user: User, tenant: Tenant, method: str) -> str:
        """Create a short-lived HS256 access token."""
        now = int(time.time())
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "tenant_id": str(tenant.id),
            "provider": method,
            "jti": str(uuid4()),
            "iat": now,
            "exp": now + self.settings.auth_access_token_expiry,
            "type": "access",
        }
        return jwt.encode(payload, self.settings.auth_secret_key, algorithm="HS256")

    async def sign_in(
        self,
        user: User,
        tenant: Tenant,
        method: str,
        *,
        is_new_user: bool = False,
        is_new_tenant: bool = False,
    ) -> dict:
        logger.info(
            "Session for user=%s tenant=%s method=%s new_user=%s new_tenant=%s",
            user.id, tenant.id, method, is_new_user, is_new_tenant,
        )
        return {
            "access_token": self.create_access_token(user, tenant, method),
            "token_type": "bearer",
            "expires_in": self.settings.auth_access_token_expiry,
        }
