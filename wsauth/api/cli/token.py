"""wsauth token — issue and inspect sign-in tokens (no database needed)."""

from __future__ import annotations

from uuid import UUID

import typer

from wsauth.errors import TokenError
from wsauth.services.email import signin_link
from wsauth.services.tokens import TokenService
from wsauth.settings import get_settings

token_app = typer.Typer(no_args_is_help=True)


@token_app.command("issue")
def issue_command(
    user_id: str = typer.Argument(..., help="User id (UUID) the token signs in"),
    tenant_url: str = typer.Option("", "--tenant-url", help="Base for the printed link (default: WSAUTH_URL)"),
):
    """Print a sign-in token and its callback link."""
    try:
        uid = UUID(user_id)
    except ValueError:
        typer.echo(f"Not a UUID: {user_id}", err=True)
        raise typer.Exit(2)

    settings = get_settings()
    token = TokenService(settings).issue(uid)
    typer.echo(token)
    typer.echo(signin_link(tenant_url or settings.url.rstrip("/"), token))


@token_app.command("verify")
def verify_command(token: str = typer.Argument(..., help="Sign-in token")):
    """Print the user id a token signs in, or why it is invalid."""
    try:
        user_id = TokenService(get_settings()).verify(token)
    except TokenError as e:
        typer.echo(f"invalid: {e.kind.value}", err=True)
        raise typer.Exit(1)
    typer.echo(str(user_id))
