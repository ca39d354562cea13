"""wsauth serve — run the sign-in API under uvicorn.

Runs behind a reverse proxy in production: forwarded headers are trusted so
``request.url`` carries the public scheme and the tenant's host.
"""

from __future__ import annotations

import typer

from wsauth.settings import get_settings

serve_app = typer.Typer(no_args_is_help=False, invoke_without_command=True)


@serve_app.callback()
def serve_command(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes (dev only)"),
    workers: int = typer.Option(1, "--workers", "-w", help="Worker processes"),
):
    """Start the sign-in API."""
    import uvicorn

    settings = get_settings()
    typer.echo(f"Serving {settings.url} on {host}:{port}")
    uvicorn.run(
        "wsauth.api.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=settings.log_level.lower(),
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
