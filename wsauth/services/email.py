"""Email service — sign-in and welcome emails over SMTP, Resend or console.

===============================================================================
SETUP
===============================================================================

1. SMTP (any SMTP server)
       WSAUTH_EMAIL_PROVIDER=smtp
       WSAUTH_SMTP_HOST=smtp.example.com
       WSAUTH_SMTP_PORT=587
       WSAUTH_SMTP_USERNAME=user@example.com
       WSAUTH_SMTP_PASSWORD=<password-or-app-password>

2. Resend (API-based, no SMTP)
       WSAUTH_EMAIL_PROVIDER=resend
       WSAUTH_RESEND_API_KEY=re_...

3. Console (dev/test — logs the message, including the sign-in link)
       WSAUTH_EMAIL_PROVIDER=console

===============================================================================

The ``send_*_email`` methods are fire-and-forget: they schedule delivery on
the running event loop and return immediately. Delivery errors are logged.
``drain()`` waits for in-flight deliveries (called on shutdown).
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol
from urllib.parse import urlencode

import httpx

from wsauth.settings import Settings

logger = logging.getLogger(__name__)

_RESEND_URL = "https://api.resend.com/emails"


class Mailer(Protocol):
    def send_signin_email(self, to: str, token: str, tenant_url: str) -> None: ...

    def send_welcome_email(self, to: str, tenant_url: str) -> None: ...


def signin_link(tenant_url: str, token: str) -> str:
    return f"{tenant_url}/auth/email.callback?{urlencode({'token': token})}"


class EmailService:
    """Send transactional emails via SMTP, Resend, or console."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._provider = settings.email_provider  # console | smtp | resend
        self._pending: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        """True if a real email backend is configured (not console)."""
        if self._provider == "smtp":
            return bool(self._settings.smtp_host)
        if self._provider == "resend":
            return bool(self._settings.resend_api_key)
        return False

    # ------------------------------------------------------------------
    # Mailer interface
    # ------------------------------------------------------------------

    def send_signin_email(self, to: str, token: str, tenant_url: str) -> None:
        expiry_min = max(1, self._settings.auth_email_signin_expiry // 60)
        link = signin_link(tenant_url, token)
        body = (
            f"Click to sign in:\n\n{link}\n\n"
            f"This link expires in {expiry_min} minutes."
        )
        self._dispatch(to, "Magic sign-in link", body)

    def send_welcome_email(self, to: str, tenant_url: str) -> None:
        body = (
            "Welcome! Your account is ready.\n\n"
            f"Sign in any time at {tenant_url}"
        )
        self._dispatch(to, "Welcome", body)

    def _dispatch(self, to: str, subject: str, body: str) -> None:
        task = asyncio.get_running_loop().create_task(self._deliver(to, subject, body))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, to: str, subject: str, body: str) -> None:
        try:
            await self.send(to, subject, body)
        except Exception:
            logger.exception("Email delivery failed to %s: %s", to, subject)

    async def drain(self) -> None:
        """Wait for in-flight deliveries to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def send(self, to: str, subject: str, body: str) -> dict:
        """Send an email now. Returns {"status": "sent"|"logged", ...}."""
        sender = self._settings.email_from

        if self._provider == "smtp":
            return await self._send_smtp(to, subject, body, sender=sender)
        elif self._provider == "resend":
            return await self._send_resend(to, subject, body, sender=sender)
        else:
            return self._send_console(to, subject, body, sender=sender)

    async def _send_smtp(self, to: str, subject: str, body: str, *, sender: str) -> dict:
        s = self._settings
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = to
        msg.set_content(body)

        def _send() -> None:
            with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=30) as server:
                server.starttls()
                if s.smtp_username:
                    server.login(s.smtp_username, s.smtp_password)
                server.send_message(msg)

        await asyncio.to_thread(_send)
        logger.info("Email sent via SMTP to %s: %s", to, subject)
        return {"status": "sent", "provider": "smtp", "to": to}

    async def _send_resend(self, to: str, subject: str, body: str, *, sender: str) -> dict:
        s = self._settings
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                _RESEND_URL,
                headers={"Authorization": f"Bearer {s.resend_api_key}"},
                json={"from": sender, "to": [to], "subject": subject, "text": body},
            )
            resp.raise_for_status()

        logger.info("Email sent via Resend to %s: %s", to, subject)
        return {"status": "sent", "provider": "resend", "to": to}

    def _send_console(self, to: str, subject: str, body: str, *, sender: str) -> dict:
        logger.info("Email [console] from=%s to=%s subject=%s\n%s", sender, to, subject, body)
        return {"status": "logged", "provider": "console", "to": to}
