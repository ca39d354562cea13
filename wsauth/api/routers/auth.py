"""Auth router — passwordless email sign-in.

- ``POST /email`` — request a sign-in link. Responds ``{"success": true}``
  whether or not the email exists. Two branches add detail: users linked to
  an identity provider get ``{"redirect": ...}`` to their provider, and a
  rate-limited user gets a redirect plus a message. A Deny also gets plain
  success: its ``auth-error`` notice is logged, not sent, so the response
  never reveals that the account exists.
- ``GET /email.callback?token=...`` — verify the link and redirect, either
  to ``/?notice=expired-token|auth-error|suspended`` or to the tenant URL with
  a session cookie set.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, EmailStr

from wsauth.api.deps import get_auth, get_settings_dep, request_hostname
from wsauth.services.auth import EmailAuthService
from wsauth.services.callback import Redirect
from wsauth.services.decisions import ForwardToProvider, RateLimited
from wsauth.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


class EmailSigninRequest(BaseModel):
    email: EmailStr


def _set_session_cookie(response: RedirectResponse, session: dict, *, secure: bool) -> None:
    """Set the HttpOnly access token cookie."""
    response.set_cookie(
        "access_token",
        session["access_token"],
        httponly=True,
        secure=secure,
        samesite="lax",
        max_age=session["expires_in"],
    )


@router.post("/email")
async def email_signin(
    body: EmailSigninRequest,
    request: Request,
    auth: EmailAuthService = Depends(get_auth),
):
    """Send a sign-in email. Generic success unless SSO-forwarded or rate limited."""
    action = await auth.request_signin(body.email, request_hostname(request))

    if isinstance(action, ForwardToProvider):
        return {"redirect": action.redirect}
    if isinstance(action, RateLimited):
        return {
            "redirect": action.redirect,
            "message": "Rate limit exceeded",
            "success": False,
        }
    # Unknown email, email sent and Deny all look the same to the caller
    return {"success": True}


@router.get("/email.callback")
async def email_callback(
    token: str | None = None,
    auth: EmailAuthService = Depends(get_auth),
    settings: Settings = Depends(get_settings_dep),
):
    """Verify a sign-in token, set the session cookie, redirect to the tenant."""
    outcome = await auth.handle_callback(token)

    if isinstance(outcome, Redirect):
        return RedirectResponse(url=outcome.location, status_code=302)

    response = RedirectResponse(url=outcome.redirect_url, status_code=302)
    _set_session_cookie(response, outcome.session, secure=settings.url.startswith("https"))
    return response
