"""Shared helpers for unit tests — in-memory fakes and model factories."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from wsauth.ontology.types import IdentityProvider, Tenant, User, UserAuthentication
from wsauth.services.auth import EmailAuthService
from wsauth.settings import Settings

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_settings(**overrides) -> Settings:
    values = {
        "url": "https://wsauth.dev",
        "auth_secret_key": "test-secret-key-for-jwt-signing-32b",
        "auth_email_signin_expiry": 600,
        "auth_access_token_expiry": 3600,
        "subdomains_enabled": False,
        "email_provider": "console",
    }
    values.update(overrides)
    return Settings(**values)


def make_tenant(name: str = "Acme", **kwargs) -> Tenant:
    return Tenant(name=name, **kwargs)


def add_provider(tenant: Tenant, name: str = "google") -> IdentityProvider:
    provider = IdentityProvider(name=name, tenant_id=tenant.id)
    tenant.identity_providers.append(provider)
    return provider


def make_user(tenant: Tenant, email: str = "alice@acme.com", **kwargs) -> User:
    # Default to an active (not invited) user
    kwargs.setdefault("last_active_at", NOW)
    return User(name=email.split("@")[0], email=email, tenant_id=tenant.id, **kwargs)


def link_provider(user: User, provider: IdentityProvider) -> UserAuthentication:
    auth = UserAuthentication(
        user_id=user.id, identity_provider_id=provider.id, provider_user_id=f"sub-{user.id}"
    )
    user.authentications.append(auth)
    return auth


class InMemoryRepository:
    """Repository fake. Users are returned in insertion order."""

    def __init__(self):
        self.users: list[User] = []
        self.tenants: list[Tenant] = []
        self.writes: list[tuple[str, UUID, datetime]] = []

    def add(self, *entities: User | Tenant) -> None:
        for entity in entities:
            if isinstance(entity, Tenant):
                self.tenants.append(entity)
            else:
                self.users.append(entity)

    async def find_users_by_email(self, email: str) -> list[User]:
        return [u for u in self.users if u.email == email.lower() and u.deleted_at is None]

    async def find_user_by_id(self, user_id: UUID) -> User | None:
        return next((u for u in self.users if u.id == user_id and u.deleted_at is None), None)

    async def find_tenant_by_domain(self, domain: str) -> Tenant | None:
        return next((t for t in self.tenants if t.domain == domain), None)

    async def find_tenant_by_subdomain(self, subdomain: str) -> Tenant | None:
        return next((t for t in self.tenants if t.subdomain == subdomain), None)

    async def find_tenant_by_id(self, tenant_id: UUID) -> Tenant | None:
        return next((t for t in self.tenants if t.id == tenant_id), None)

    async def set_last_signin_email_sent_at(self, user_id: UUID, when: datetime) -> None:
        self.writes.append(("last_signin_email_sent_at", user_id, when))
        user = await self.find_user_by_id(user_id)
        if user:
            user.last_signin_email_sent_at = when

    async def set_last_active_at(self, user_id: UUID, when: datetime) -> None:
        self.writes.append(("last_active_at", user_id, when))
        user = await self.find_user_by_id(user_id)
        if user:
            user.last_active_at = when


class RecordingMailer:
    def __init__(self):
        self.signin: list[dict] = []
        self.welcome: list[dict] = []

    def send_signin_email(self, to: str, token: str, tenant_url: str) -> None:
        self.signin.append({"to": to, "token": token, "tenant_url": tenant_url})

    def send_welcome_email(self, to: str, tenant_url: str) -> None:
        self.welcome.append({"to": to, "tenant_url": tenant_url})


class RecordingSessions:
    def __init__(self):
        self.calls: list[dict] = []

    async def sign_in(self, user, tenant, method, *, is_new_user=False, is_new_tenant=False) -> dict:
        self.calls.append({
            "user": user,
            "tenant": tenant,
            "method": method,
            "is_new_user": is_new_user,
            "is_new_tenant": is_new_tenant,
        })
        return {"access_token": f"session-{user.id}", "token_type": "bearer", "expires_in": 3600}


def make_service(**settings_overrides):
    """EmailAuthService wired to fakes. Returns (service, repo, mailer, sessions)."""
    repo = InMemoryRepository()
    mailer = RecordingMailer()
    sessions = RecordingSessions()
    svc = EmailAuthService(repo, mailer, sessions, make_settings(**settings_overrides))
    return svc, repo, mailer, sessions
