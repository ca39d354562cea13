"""Sign-in callback — turn a returned token into a session or a redirect notice.

Every invalid token (malformed, expired, forged, or for a user that no
longer exists) yields the same ``expired-token`` notice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from wsauth.errors import TokenError
from wsauth.ontology.base import utcnow
from wsauth.ontology.types import Tenant, User
from wsauth.services.email import Mailer
from wsauth.services.repository import Repository
from wsauth.services.session import SessionEstablisher
from wsauth.services.tenants import TenantResolver
from wsauth.services.tokens import TokenService

logger = logging.getLogger(__name__)

SIGNIN_METHOD = "email"


@dataclass(frozen=True)
class Redirect:
    notice: str

    @property
    def location(self) -> str:
        return f"/?notice={self.notice}"


@dataclass(frozen=True)
class SessionEstablished:
    user: User
    tenant: Tenant
    redirect_url: str
    session: dict


Outcome = Union[Redirect, SessionEstablished]


class CallbackHandler:
    def __init__(
        self,
        tokens: TokenService,
        repository: Repository,
        resolver: TenantResolver,
        mailer: Mailer,
        sessions: SessionEstablisher,
    ):
        self.tokens = tokens
        self.repository = repository
        self.resolver = resolver
        self.mailer = mailer
        self.sessions = sessions

    async def handle_callback(self, token: str, *, now: datetime | None = None) -> Outcome:
        try:
            user_id = self.tokens.verify(token)
        except TokenError as e:
            logger.debug("Sign-in token rejected: %s", e.kind.value)
            return Redirect("expired-token")

        user = await self.repository.find_user_by_id(user_id)
        if user is None:
            logger.debug("Sign-in token subject %s not found", user_id)
            return Redirect("expired-token")

        tenant = await self.repository.find_tenant_by_id(user.tenant_id)
        if tenant is None or not tenant.guest_signin:
            return Redirect("auth-error")

        if user.is_suspended:
            logger.info("Suspended user=%s attempted email sign-in", user.id)
            return Redirect("suspended")

        url = self.resolver.url_for(tenant)
        if user.is_invited:
            self.mailer.send_welcome_email(user.email, url)

        now = now or utcnow()
        await self.repository.set_last_active_at(user.id, now)
        user.last_active_at = now

        session = await self.sessions.sign_in(
            user, tenant, SIGNIN_METHOD, is_new_user=False, is_new_tenant=False
        )
        return SessionEstablished(user=user, tenant=tenant, redirect_url=url, session=session)
