"""Shared service bootstrap — Settings, DB, repository, mailer, auth service.

Used by both the API lifespan (api/main.py) and CLI commands (api/cli/).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from wsauth.services.auth import EmailAuthService
from wsauth.services.database import Database
from wsauth.services.email import EmailService
from wsauth.services.repository import PostgresRepository
from wsauth.services.session import TokenSessionEstablisher
from wsauth.settings import Settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def bootstrap_services(settings: Settings | None = None):
    """Shared service init for API lifespan and CLI commands.

    Yields a 3-tuple: (db, settings, auth). Pending emails are drained and
    the pool closed on exit.
    """
    settings = settings or Settings()
    db = Database(settings)
    await db.connect()

    mailer = EmailService(settings)
    if not mailer.enabled:
        logger.warning(
            "No email backend configured (provider=%s); sign-in links are only logged",
            settings.email_provider,
        )
    auth = EmailAuthService(
        PostgresRepository(db),
        mailer,
        TokenSessionEstablisher(settings),
        settings,
    )
    try:
        yield db, settings, auth
    finally:
        await mailer.drain()
        await db.close()
