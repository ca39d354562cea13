"""Unit tests for TenantResolver — custom domain and custom subdomain lookup."""

from __future__ import annotations

import pytest

from tests.unit.helpers import InMemoryRepository, make_settings, make_tenant
from wsauth.services.tenants import TenantResolver


@pytest.fixture
def repo():
    repo = InMemoryRepository()
    repo.add(
        make_tenant("Acme", domain="wiki.acme.com", subdomain="acme"),
        make_tenant("Globex", subdomain="globex"),
    )
    return repo


def _resolver(repo, **overrides):
    return TenantResolver(repo, make_settings(**overrides))


class TestResolve:
    @pytest.mark.asyncio
    async def test_custom_domain(self, repo):
        tenant = await _resolver(repo).resolve("wiki.acme.com")
        assert tenant is not None and tenant.name == "Acme"

    @pytest.mark.asyncio
    async def test_custom_domain_with_port_and_case(self, repo):
        tenant = await _resolver(repo).resolve("Wiki.Acme.com:443")
        assert tenant is not None and tenant.name == "Acme"

    @pytest.mark.asyncio
    async def test_unregistered_custom_domain(self, repo):
        assert await _resolver(repo).resolve("docs.initech.com") is None

    @pytest.mark.asyncio
    async def test_subdomain_when_enabled(self, repo):
        tenant = await _resolver(repo, subdomains_enabled=True).resolve("globex.wsauth.dev")
        assert tenant is not None and tenant.name == "Globex"

    @pytest.mark.asyncio
    async def test_subdomain_ignored_when_disabled(self, repo):
        assert await _resolver(repo).resolve("globex.wsauth.dev") is None

    @pytest.mark.asyncio
    async def test_explicit_flag_overrides_settings(self, repo):
        resolver = _resolver(repo, subdomains_enabled=False)
        tenant = await resolver.resolve("globex.wsauth.dev", subdomain_feature_enabled=True)
        assert tenant is not None and tenant.name == "Globex"

    @pytest.mark.asyncio
    async def test_base_host_and_reserved_labels(self, repo):
        resolver = _resolver(repo, subdomains_enabled=True)
        assert await resolver.resolve("wsauth.dev") is None
        assert await resolver.resolve("www.wsauth.dev") is None

    @pytest.mark.asyncio
    async def test_unknown_subdomain(self, repo):
        assert await _resolver(repo, subdomains_enabled=True).resolve("initech.wsauth.dev") is None


class TestUrlFor:
    def test_url_follows_settings(self, repo):
        [acme, globex] = repo.tenants
        assert _resolver(repo).url_for(acme) == "https://wiki.acme.com"
        assert _resolver(repo).url_for(globex) == "https://wsauth.dev"
        assert _resolver(repo, subdomains_enabled=True).url_for(globex) == "https://globex.wsauth.dev"
