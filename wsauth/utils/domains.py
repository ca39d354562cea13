"""Host parsing — custom domains, custom subdomains and tenant URLs.

Every decision is made relative to the app's base URL (``Settings.url``):
a host on a different registrable domain is a *custom domain*; a host one
label below the base domain is a *custom subdomain* unless that label is
reserved.

Public-suffix handling uses tldextract's bundled snapshot only, so parsing
never touches the network.

Examples::

    from wsauth.utils.domains import is_custom_domain, is_custom_subdomain

    base = "https://wsauth.dev"
    is_custom_domain("wiki.acme.com", base)        # True
    is_custom_subdomain("acme.wsauth.dev", base)   # True
    is_custom_subdomain("www.wsauth.dev", base)    # False (reserved)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple
from urllib.parse import urlsplit, urlunsplit

import tldextract

if TYPE_CHECKING:
    from wsauth.ontology.types import Tenant

_EXTRACT = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())

RESERVED_SUBDOMAINS = frozenset({
    "about", "admin", "api", "app", "blog", "cdn", "dev", "developer",
    "developers", "docs", "files", "help", "mail", "smtp", "static",
    "status", "support", "www",
})


class ParsedDomain(NamedTuple):
    subdomain: str
    domain: str
    suffix: str

    @property
    def registrable(self) -> str:
        """``domain.suffix`` (or just ``domain`` for hosts like localhost)."""
        return f"{self.domain}.{self.suffix}" if self.suffix else self.domain


def hostname_of(value: str) -> str:
    """Lower-cased hostname from a bare host, ``host:port`` or full URL."""
    value = (value or "").strip().lower()
    if not value:
        return ""
    if "://" not in value:
        value = f"//{value}"
    return urlsplit(value).hostname or ""


def parse_domain(value: str) -> ParsedDomain:
    """Split a host or URL into subdomain, domain and public suffix.

    Examples::

        parse_domain("https://acme.wsauth.dev/home")  # ('acme', 'wsauth', 'dev')
        parse_domain("localhost:8000")                # ('', 'localhost', '')
    """
    host = hostname_of(value)
    if not host:
        return ParsedDomain("", "", "")
    result = _EXTRACT(host)
    return ParsedDomain(result.subdomain, result.domain, result.suffix)


def is_custom_domain(hostname: str, base_url: str) -> bool:
    """True when ``hostname`` is not on the base URL's registrable domain."""
    parsed = parse_domain(hostname)
    main = parse_domain(base_url)
    if not parsed.domain or not main.domain:
        return False
    return parsed.registrable != main.registrable


def is_custom_subdomain(hostname: str, base_url: str) -> bool:
    """True for ``<label>.<base domain>`` where label is a single, non-reserved label."""
    parsed = parse_domain(hostname)
    main = parse_domain(base_url)
    if not parsed.domain or parsed.registrable != main.registrable:
        return False
    label = parsed.subdomain
    return bool(label) and "." not in label and label not in RESERVED_SUBDOMAINS


def subdomain_label(hostname: str) -> str | None:
    return parse_domain(hostname).subdomain or None


def tenant_url(tenant: Tenant, base_url: str, subdomains_enabled: bool) -> str:
    """Canonical URL of a tenant, without trailing slash.

    Custom domain wins; then ``<subdomain>.<base domain>`` when the subdomain
    feature is on; else the base URL itself.
    """
    if tenant.domain:
        return f"https://{tenant.domain}"
    base = base_url.rstrip("/")
    if not tenant.subdomain or not subdomains_enabled:
        return base

    parts = urlsplit(base)
    host = f"{tenant.subdomain}.{parse_domain(base).registrable}"
    if parts.port:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, host, parts.path, "", "")).rstrip("/")
