"""CLI entry point — Typer app.

Subcommands that need the database use services.bootstrap directly;
``token`` works offline from Settings alone.
"""

from __future__ import annotations

import logging

import typer

from wsauth.settings import get_settings

app = typer.Typer(name="wsauth", no_args_is_help=True)


@app.callback()
def main():
    """Passwordless email sign-in service."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(name)s %(levelname)s  %(message)s",
    )


# Register subcommands
from wsauth.api.cli.migrate import migrate_app  # noqa: E402
from wsauth.api.cli.serve import serve_app  # noqa: E402
from wsauth.api.cli.token import token_app  # noqa: E402

app.add_typer(serve_app, name="serve")
app.add_typer(migrate_app, name="migrate")
app.add_typer(token_app, name="token")
