"""Unit tests for AuthDecisionEngine — user selection and branch ordering."""

from __future__ import annotations

from datetime import timedelta

import pytest

from tests.unit.helpers import (
    NOW,
    InMemoryRepository,
    add_provider,
    link_provider,
    make_settings,
    make_tenant,
    make_user,
)
from wsauth.services.decisions import (
    AuthDecisionEngine,
    AuthorizationDenied,
    Deny,
    ForwardToProvider,
    RateLimited,
    SendEmail,
    select_user,
)
from wsauth.services.rate_limit import RateLimiter
from wsauth.services.tenants import TenantResolver


def _engine(repo, **overrides):
    resolver = TenantResolver(repo, make_settings(**overrides))
    return AuthDecisionEngine(repo, resolver, RateLimiter(repo))


class TestSelectUser:
    def test_prefers_user_in_resolved_tenant(self):
        acme, globex = make_tenant("Acme"), make_tenant("Globex")
        a, g = make_user(acme), make_user(globex)
        assert select_user([a, g], globex) is g

    def test_first_candidate_without_tenant(self):
        acme, globex = make_tenant("Acme"), make_tenant("Globex")
        a, g = make_user(acme), make_user(globex)
        assert select_user([g, a], None) is g

    def test_first_candidate_when_none_in_tenant(self):
        acme, globex, initech = make_tenant("Acme"), make_tenant("Globex"), make_tenant("Initech")
        a, g = make_user(acme), make_user(globex)
        assert select_user([a, g], initech) is a


class TestDecide:
    @pytest.mark.asyncio
    async def test_send_email_falls_back_to_users_tenant(self):
        repo = InMemoryRepository()
        tenant = make_tenant(domain="wiki.acme.com")
        user = make_user(tenant)
        repo.add(tenant, user)

        action = await _engine(repo).decide([user], None, now=NOW)
        assert isinstance(action, SendEmail)
        assert action.user is user
        assert action.tenant.id == tenant.id
        assert action.tenant_url == "https://wiki.acme.com"

    @pytest.mark.asyncio
    async def test_deny_when_no_tenant(self):
        repo = InMemoryRepository()
        orphan = make_user(make_tenant())  # tenant never stored
        action = await _engine(repo).decide([orphan], None, now=NOW)
        assert action == Deny(notice="auth-error")

    @pytest.mark.asyncio
    async def test_forward_to_provider(self):
        repo = InMemoryRepository()
        tenant = make_tenant(subdomain="acme")
        provider = add_provider(tenant, "slack")
        user = make_user(tenant)
        link_provider(user, provider)
        repo.add(tenant, user)

        action = await _engine(repo, subdomains_enabled=True).decide([user], tenant, now=NOW)
        assert isinstance(action, ForwardToProvider)
        assert action.provider == "slack"
        assert action.redirect == "https://acme.wsauth.dev/auth/slack"

    @pytest.mark.asyncio
    async def test_forward_beats_guest_policy_and_rate_limit(self):
        repo = InMemoryRepository()
        tenant = make_tenant(guest_signin=False)
        provider = add_provider(tenant)
        user = make_user(tenant, last_signin_email_sent_at=NOW - timedelta(seconds=5))
        link_provider(user, provider)
        repo.add(tenant, user)

        action = await _engine(repo).decide([user], None, now=NOW)
        assert isinstance(action, ForwardToProvider)
        assert action.provider == "google"

    @pytest.mark.asyncio
    async def test_binding_to_unknown_provider_is_denied(self):
        repo = InMemoryRepository()
        tenant = make_tenant()
        stray = add_provider(make_tenant("Other"))
        user = make_user(tenant)
        link_provider(user, stray)
        repo.add(tenant, user)

        action = await _engine(repo).decide([user], None, now=NOW)
        assert isinstance(action, Deny)

    @pytest.mark.asyncio
    async def test_foreign_sso_user_forwarded_to_own_tenant(self):
        repo = InMemoryRepository()
        acme = make_tenant("Acme", domain="wiki.acme.com")
        other = make_tenant("Other", domain="docs.other.io")
        user = make_user(other)
        link_provider(user, add_provider(other, "okta"))
        repo.add(acme, other, user)

        action = await _engine(repo).decide([user], acme, now=NOW)
        assert action == ForwardToProvider(provider="okta", tenant_url="https://docs.other.io")

    @pytest.mark.asyncio
    async def test_guest_signin_disabled(self):
        repo = InMemoryRepository()
        tenant = make_tenant(guest_signin=False)
        user = make_user(tenant)
        repo.add(tenant, user)

        action = await _engine(repo).decide([user], None, now=NOW)
        assert isinstance(action, AuthorizationDenied)
        assert action.tenant.id == tenant.id

    @pytest.mark.asyncio
    async def test_guest_check_runs_before_rate_limit(self):
        repo = InMemoryRepository()
        tenant = make_tenant(guest_signin=False)
        user = make_user(tenant, last_signin_email_sent_at=NOW - timedelta(seconds=5))
        repo.add(tenant, user)

        action = await _engine(repo).decide([user], None, now=NOW)
        assert isinstance(action, AuthorizationDenied)

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        repo = InMemoryRepository()
        tenant = make_tenant()
        user = make_user(tenant, last_signin_email_sent_at=NOW - timedelta(minutes=1, seconds=59))
        repo.add(tenant, user)

        action = await _engine(repo).decide([user], None, now=NOW)
        assert isinstance(action, RateLimited)
        assert action.redirect == "https://wsauth.dev?notice=email-auth-ratelimit"

    @pytest.mark.asyncio
    async def test_resolved_tenant_used_even_for_foreign_user(self):
        repo = InMemoryRepository()
        home, target = make_tenant("Home"), make_tenant("Target", guest_signin=False)
        user = make_user(home)
        repo.add(home, target, user)

        action = await _engine(repo).decide([user], target, now=NOW)
        assert isinstance(action, AuthorizationDenied)
        assert action.tenant.id == target.id

    @pytest.mark.asyncio
    async def test_empty_candidates_rejected(self):
        with pytest.raises(ValueError):
            await _engine(InMemoryRepository()).decide([], None, now=NOW)
