"""Entity models — tenants, their identity providers, users and user bindings.

Each model defines:
  __table_name__  — postgres table name

IdentityProvider and UserAuthentication rows are loaded together with their
parent (Tenant.identity_providers, User.authentications) and never queried on
their own by the sign-in flow.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from wsauth.ontology.base import CoreModel


class IdentityProvider(CoreModel):
    """A federated identity provider (google, slack, oidc, ...) configured for a tenant."""

    __table_name__ = "identity_providers"

    name: str
    tenant_id: UUID
    enabled: bool = True


class UserAuthentication(CoreModel):
    """Links a user to one of their tenant's identity providers."""

    __table_name__ = "user_authentications"

    user_id: UUID
    identity_provider_id: UUID
    provider_user_id: str = ""


class Tenant(CoreModel):
    """A workspace. Owns users, policy, and an optional custom domain / subdomain."""

    __table_name__ = "tenants"

    name: str
    domain: str | None = None       # custom domain, e.g. "wiki.acme.com"
    subdomain: str | None = None    # label under the base host, e.g. "acme"
    guest_signin: bool = True       # email (non-federated) sign-in allowed
    identity_providers: list[IdentityProvider] = Field(default_factory=list)

    def find_provider(self, provider_id: UUID) -> IdentityProvider | None:
        for provider in self.identity_providers:
            if provider.id == provider_id:
                return provider
        return None


class User(CoreModel):
    """User profile. Email is the case-insensitive lookup key across tenants."""

    __table_name__ = "users"

    name: str = ""
    email: str
    tenant_id: UUID
    authentications: list[UserAuthentication] = Field(default_factory=list)
    last_signin_email_sent_at: datetime | None = None
    last_active_at: datetime | None = None
    suspended_at: datetime | None = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_suspended(self) -> bool:
        return self.suspended_at is not None

    @property
    def is_invited(self) -> bool:
        """True until the user completes a first sign-in."""
        return self.last_active_at is None
