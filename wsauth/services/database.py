"""asyncpg pool for the sign-in tables.

Only the three calls the repository needs are exposed. Rows come back as
``asyncpg.Record`` and are validated into models by the repository.
"""

from __future__ import annotations

import logging

import asyncpg

from wsauth.settings import Settings

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.pool: asyncpg.Pool | None = None

    async def connect(self):
        self.pool = await asyncpg.create_pool(
            self.settings.database_url,
            min_size=self.settings.db_pool_min,
            max_size=self.settings.db_pool_max,
        )
        logger.info("Database pool ready (min=%d max=%d)",
                    self.settings.db_pool_min, self.settings.db_pool_max)

    async def close(self):
        if self.pool:
            await self.pool.close()
            self.pool = None

    def _require_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise RuntimeError("Database not connected")
        return self.pool

    async def fetch(self, query: str, *args) -> list[asyncpg.Record]:
        return await self._require_pool().fetch(query, *args)

    async def fetchrow(self, query: str, *args) -> asyncpg.Record | None:
        return await self._require_pool().fetchrow(query, *args)

    async def execute(self, query: str, *args) -> str:
        return await self._require_pool().execute(query, *args)
