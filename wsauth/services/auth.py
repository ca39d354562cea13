"""Auth service — passwordless email sign-in for multi-tenant workspaces.

Owns the two halves of the flow:

* ``request_signin`` — resolve tenant + user for an email, decide what to
  do, and (when allowed) email a short-lived sign-in link.
* ``handle_callback`` — verify the link's token and establish a session.

Receives repository, mailer, session establisher and settings from
services.bootstrap (or test fakes).

Testing locally
---------------
1. Start server with the console provider: ``wsauth serve``
2. Request a link (printed in the server log):
   curl -X POST localhost:8000/auth/email -d '{"email":"test@example.com"}'
   -H 'Content-Type: application/json'
3. Open the link in a browser — verifies the token, sets the access_token
   cookie and redirects to the tenant URL.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import EmailStr, TypeAdapter, ValidationError

from wsauth.errors import AuthorizationError, InputError
from wsauth.ontology.base import utcnow
from wsauth.services.callback import CallbackHandler, Outcome
from wsauth.services.decisions import (
    Action,
    AuthDecisionEngine,
    AuthorizationDenied,
    Deny,
    SendEmail,
)
from wsauth.services.email import Mailer
from wsauth.services.rate_limit import RateLimiter
from wsauth.services.repository import Repository
from wsauth.services.session import SessionEstablisher
from wsauth.services.tenants import TenantResolver
from wsauth.services.tokens import TokenService
from wsauth.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_EMAIL = TypeAdapter(EmailStr)


def normalize_email(email: str | None) -> str:
    """Validated, lower-cased email. Raises InputError."""
    if not email or not email.strip():
        raise InputError("email is required")
    try:
        return _EMAIL.validate_python(email.strip()).lower()
    except ValidationError:
        raise InputError("email is invalid") from None


class EmailAuthService:
    def __init__(
        self,
        repository: Repository,
        mailer: Mailer,
        sessions: SessionEstablisher,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.repository = repository
        self.mailer = mailer
        self.tokens = TokenService(self.settings)
        self.resolver = TenantResolver(repository, self.settings)
        self.rate_limiter = RateLimiter(repository)
        self.engine = AuthDecisionEngine(repository, self.resolver, self.rate_limiter)
        self.callbacks = CallbackHandler(
            self.tokens, repository, self.resolver, mailer, sessions
        )

    async def request_signin(
        self, email: str | None, hostname: str, *, now: datetime | None = None
    ) -> Action | None:
        """Decide and act on a sign-in request.

        Returns None when no user has this email (callers report plain
        success), else the Action taken. Raises InputError for a bad email
        and AuthorizationError when the tenant disallows guest sign-in.
        """
        address = normalize_email(email)
        users = await self.repository.find_users_by_email(address)
        if not users:
            logger.info("Sign-in requested for unknown email")
            return None

        tenant = await self.resolver.resolve(hostname)
        now = now or utcnow()
        action = await self.engine.decide(users, tenant, now=now)
        logger.info("Sign-in decision %s for host=%s", type(action).__name__, hostname)

        if isinstance(action, Deny):
            logger.warning("Sign-in denied with notice=%s for host=%s", action.notice, hostname)

        if isinstance(action, AuthorizationDenied):
            raise AuthorizationError()

        if isinstance(action, SendEmail):
            user = action.user
            token = self.tokens.issue(user.id)
            self.mailer.send_signin_email(user.email, token, action.tenant_url)
            await self.rate_limiter.record(user, now)
            logger.info("Sign-in email queued for user=%s tenant=%s", user.id, action.tenant.id)

        return action

    async def handle_callback(self, token: str | None, *, now: datetime | None = None) -> Outcome:
        if not token or not token.strip():
            raise InputError("token is required")
        outcome = await self.callbacks.handle_callback(token.strip(), now=now)
        logger.info("Sign-in callback outcome %s", type(outcome).__name__)
        return outcome
