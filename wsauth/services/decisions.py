"""Sign-in decision — which (user, tenant) pair a request targets and what to do.

``AuthDecisionEngine.decide`` returns one of the Action variants below.
Order of checks matters:

1. tenant must be known                        → Deny
2. SSO-linked users always go to their provider → ForwardToProvider
3. guest sign-in must be enabled               → AuthorizationDenied
4. per-user email rate limit                   → RateLimited
5. otherwise                                   → SendEmail

Check 2 runs before 3 and 4 so an SSO-linked account never receives a
guest email and is never reported as rate limited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from wsauth.ontology.types import Tenant, User
from wsauth.services.rate_limit import RateLimiter
from wsauth.services.repository import Repository
from wsauth.services.tenants import TenantResolver

logger = logging.getLogger(__name__)

RATE_LIMIT_NOTICE = "email-auth-ratelimit"


@dataclass(frozen=True)
class Deny:
    """No usable tenant or provider binding; nothing is sent."""

    notice: str = "auth-error"


@dataclass(frozen=True)
class ForwardToProvider:
    provider: str
    tenant_url: str

    @property
    def redirect(self) -> str:
        return f"{self.tenant_url}/auth/{self.provider}"


@dataclass(frozen=True)
class AuthorizationDenied:
    tenant: Tenant


@dataclass(frozen=True)
class RateLimited:
    tenant_url: str

    @property
    def redirect(self) -> str:
        return f"{self.tenant_url}?notice={RATE_LIMIT_NOTICE}"


@dataclass(frozen=True)
class SendEmail:
    user: User
    tenant: Tenant
    tenant_url: str


Action = Union[Deny, ForwardToProvider, AuthorizationDenied, RateLimited, SendEmail]


def select_user(candidates: list[User], tenant: Tenant | None) -> User:
    """First candidate in ``tenant``, else the first candidate. Input order is kept."""
    if tenant is not None:
        for user in candidates:
            if user.tenant_id == tenant.id:
                return user
    return candidates[0]


class AuthDecisionEngine:
    def __init__(
        self,
        repository: Repository,
        resolver: TenantResolver,
        rate_limiter: RateLimiter,
    ):
        self.repository = repository
        self.resolver = resolver
        self.rate_limiter = rate_limiter

    async def decide(
        self,
        candidates: list[User],
        resolved_tenant: Tenant | None,
        *,
        now: datetime | None = None,
    ) -> Action:
        if not candidates:
            raise ValueError("decide() needs at least one candidate user")

        user = select_user(candidates, resolved_tenant)
        tenant = resolved_tenant
        if tenant is None:
            tenant = await self.repository.find_tenant_by_id(user.tenant_id)
        if tenant is None:
            logger.warning("No tenant for user=%s tenant_id=%s", user.id, user.tenant_id)
            return Deny()

        if user.authentications:
            return await self._forward(user, tenant)

        url = self.resolver.url_for(tenant)

        if not tenant.guest_signin:
            return AuthorizationDenied(tenant=tenant)

        if not self.rate_limiter.check(user, now):
            return RateLimited(tenant_url=url)

        return SendEmail(user=user, tenant=tenant, tenant_url=url)

    async def _forward(self, user: User, tenant: Tenant) -> Action:
        """Forward an SSO-bound user to the provider in their own tenant."""
        owner = tenant
        if user.tenant_id != tenant.id:
            owner = await self.repository.find_tenant_by_id(user.tenant_id)
        provider = None
        if owner is not None:
            provider = owner.find_provider(user.authentications[0].identity_provider_id)
        if provider is None:
            # Binding to a provider the tenant no longer exposes
            logger.warning("User %s bound to unknown provider in tenant %s", user.id, user.tenant_id)
            return Deny()
        return ForwardToProvider(provider=provider.name, tenant_url=self.resolver.url_for(owner))
