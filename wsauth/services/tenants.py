"""Tenant resolution from the request host.

A request on ``wiki.acme.com`` targets the tenant registered with that
custom domain; with subdomains enabled, ``acme.<base domain>`` targets the
tenant with subdomain ``acme``. Any other host yields no tenant constraint.
"""

from __future__ import annotations

import logging

from wsauth.ontology.types import Tenant
from wsauth.services.repository import Repository
from wsauth.settings import Settings, get_settings
from wsauth.utils.domains import (
    hostname_of,
    is_custom_domain,
    is_custom_subdomain,
    subdomain_label,
    tenant_url,
)

logger = logging.getLogger(__name__)


class TenantResolver:
    def __init__(self, repository: Repository, settings: Settings | None = None):
        self.repository = repository
        self.settings = settings or get_settings()

    async def resolve(
        self, hostname: str, subdomain_feature_enabled: bool | None = None
    ) -> Tenant | None:
        """Tenant targeted by ``hostname``, or None when the host implies none."""
        if subdomain_feature_enabled is None:
            subdomain_feature_enabled = self.settings.subdomains_enabled
        host = hostname_of(hostname)
        base = self.settings.url

        if is_custom_domain(host, base):
            tenant = await self.repository.find_tenant_by_domain(host)
            logger.debug("host=%s custom domain -> tenant=%s", host, tenant and tenant.id)
            return tenant

        if subdomain_feature_enabled and is_custom_subdomain(host, base):
            label = subdomain_label(host)
            if label:
                tenant = await self.repository.find_tenant_by_subdomain(label)
                logger.debug("host=%s subdomain=%s -> tenant=%s", host, label, tenant and tenant.id)
                return tenant

        return None

    def url_for(self, tenant: Tenant) -> str:
        return tenant_url(tenant, self.settings.url, self.settings.subdomains_enabled)
