"""FastAPI application — lifespan, error handlers, middleware and routers."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from wsauth.errors import WsAuthError
from wsauth.services.bootstrap import bootstrap_services
from wsauth.settings import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with bootstrap_services(app.state.settings) as (_db, _settings, auth):
        app.state.auth = auth
        yield


def _error_body(error: str, message: str, status: int) -> dict:
    return {"error": error, "message": message, "ok": False, "status": status}


async def wsauth_error_handler(request: Request, exc: WsAuthError) -> JSONResponse:
    return JSONResponse(_error_body(exc.error, exc.message, exc.status), status_code=exc.status)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "invalid request") if errors else "invalid request"
    return JSONResponse(_error_body("validation_error", message, 400), status_code=400)


def create_app() -> FastAPI:
    boot_settings = get_settings()

    app = FastAPI(title="wsauth", version="0.1.0", lifespan=lifespan)
    app.state.settings = boot_settings

    app.add_exception_handler(WsAuthError, wsauth_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Trust X-Forwarded-Proto/For from reverse proxy so request.url uses https://
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    from wsauth.api.routers import auth

    if boot_settings.email_signin_enabled:
        app.include_router(auth.router, prefix="/auth", tags=["auth"])

    @app.get("/health")
    async def root_health():
        providers = ["email"] if boot_settings.email_signin_enabled else []
        return {
            "status": "ok",
            "auth": {
                "providers": providers,
                "subdomains_enabled": boot_settings.subdomains_enabled,
            },
        }

    return app


app = create_app()
