"""Repository — the storage boundary of the sign-in flow.

``Repository`` is the interface the services depend on. ``PostgresRepository``
implements it over the asyncpg pool; tests use an in-memory fake.

Lookups return fully hydrated models: users carry their identity-provider
bindings, tenants carry their enabled identity providers in creation order.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Protocol
from uuid import UUID

from wsauth.ontology.types import IdentityProvider, Tenant, User, UserAuthentication
from wsauth.services.database import Database


class Repository(Protocol):
    async def find_users_by_email(self, email: str) -> list[User]: ...

    async def find_user_by_id(self, user_id: UUID) -> User | None: ...

    async def find_tenant_by_domain(self, domain: str) -> Tenant | None: ...

    async def find_tenant_by_subdomain(self, subdomain: str) -> Tenant | None: ...

    async def find_tenant_by_id(self, tenant_id: UUID) -> Tenant | None: ...

    async def set_last_signin_email_sent_at(self, user_id: UUID, when: datetime) -> None: ...

    async def set_last_active_at(self, user_id: UUID, when: datetime) -> None: ...


class PostgresRepository:
    def __init__(self, db: Database):
        self.db = db

    # -----------------------------------------------------------------------
    # Users
    # -----------------------------------------------------------------------

    async def find_users_by_email(self, email: str) -> list[User]:
        """All live users with this email, across tenants, oldest first."""
        rows = await self.db.fetch(
            "SELECT * FROM users WHERE email = $1 AND deleted_at IS NULL"
            " ORDER BY created_at, id",
            email.strip().lower(),
        )
        return await self._hydrate_users(rows)

    async def find_user_by_id(self, user_id: UUID) -> User | None:
        row = await self.db.fetchrow(
            "SELECT * FROM users WHERE id = $1 AND deleted_at IS NULL", user_id
        )
        if not row:
            return None
        [user] = await self._hydrate_users([row])
        return user

    async def set_last_signin_email_sent_at(self, user_id: UUID, when: datetime) -> None:
        await self.db.execute(
            "UPDATE users SET last_signin_email_sent_at = $2, updated_at = now() WHERE id = $1",
            user_id,
            when,
        )

    async def set_last_active_at(self, user_id: UUID, when: datetime) -> None:
        await self.db.execute(
            "UPDATE users SET last_active_at = $2, updated_at = now() WHERE id = $1",
            user_id,
            when,
        )

    async def _hydrate_users(self, rows) -> list[User]:
        if not rows:
            return []
        user_ids = [row["id"] for row in rows]
        auth_rows = await self.db.fetch(
            "SELECT * FROM user_authentications WHERE user_id = ANY($1::uuid[])"
            " AND deleted_at IS NULL ORDER BY created_at, id",
            user_ids,
        )
        by_user: dict[UUID, list[UserAuthentication]] = defaultdict(list)
        for arow in auth_rows:
            auth = UserAuthentication.model_validate(dict(arow))
            by_user[auth.user_id].append(auth)
        return [
            User.model_validate({**dict(row), "authentications": by_user.get(row["id"], [])})
            for row in rows
        ]

    # -----------------------------------------------------------------------
    # Tenants
    # -----------------------------------------------------------------------

    async def find_tenant_by_domain(self, domain: str) -> Tenant | None:
        return await self._find_tenant("domain", domain.strip().lower())

    async def find_tenant_by_subdomain(self, subdomain: str) -> Tenant | None:
        return await self._find_tenant("subdomain", subdomain.strip().lower())

    async def find_tenant_by_id(self, tenant_id: UUID) -> Tenant | None:
        return await self._find_tenant("id", tenant_id)

    async def _find_tenant(self, column: str, value) -> Tenant | None:
        row = await self.db.fetchrow(
            f"SELECT * FROM tenants WHERE {column} = $1 AND deleted_at IS NULL", value
        )
        if not row:
            return None
        provider_rows = await self.db.fetch(
            "SELECT * FROM identity_providers WHERE tenant_id = $1 AND enabled"
            " AND deleted_at IS NULL ORDER BY created_at, id",
            row["id"],
        )
        providers = [IdentityProvider.model_validate(dict(p)) for p in provider_rows]
        return Tenant.model_validate({**dict(row), "identity_providers": providers})
