"""Per-user rate limit on outbound sign-in emails.

check → send → record are separate awaits with no compare-and-set, so two
concurrent requests inside the window can both pass ``check`` and send one
extra email between them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from wsauth.ontology.base import utcnow
from wsauth.ontology.types import User
from wsauth.services.repository import Repository

logger = logging.getLogger(__name__)

SIGNIN_EMAIL_WINDOW = timedelta(minutes=2)


class RateLimiter:
    def __init__(self, repository: Repository, window: timedelta = SIGNIN_EMAIL_WINDOW):
        self.repository = repository
        self.window = window

    def check(self, user: User, now: datetime | None = None) -> bool:
        """True when a sign-in email may be sent to ``user`` now."""
        sent_at = user.last_signin_email_sent_at
        if sent_at is None:
            return True
        now = now or utcnow()
        if now - sent_at < self.window:
            logger.info("Sign-in email rate limited for user=%s", user.id)
            return False
        return True

    async def record(self, user: User, now: datetime | None = None) -> None:
        """Stamp and persist the time a sign-in email went out."""
        now = now or utcnow()
        user.last_signin_email_sent_at = now
        await self.repository.set_last_signin_email_sent_at(user.id, now)
