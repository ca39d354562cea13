"""FastAPI dependency injection — shared service accessors."""

from __future__ import annotations

from fastapi import Request

from wsauth.services.auth import EmailAuthService
from wsauth.settings import Settings


def get_auth(request: Request) -> EmailAuthService:
    return request.app.state.auth


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def request_hostname(request: Request) -> str:
    """Hostname the client addressed (Host header, port stripped)."""
    return request.url.hostname or ""
