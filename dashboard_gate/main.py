from __future__ import annotations

import logging
import sys
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pythonjsonlogger.json import JsonFormatter
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from . import __version__
from .auth.cookies import SessionCookie
from .auth.gate import Gate
from .auth.routes_auth import router as auth_router
from .config import Settings, get_settings
from .exceptions import GateError, RateLimited, ValidationFailed
from .rate_limit import build_limiter
from .schemas import HealthResponse

SERVICE_NAME = "dashboard-gate"
_HANDLER_NAME = "gate-stdout"

log = logging.getLogger("gate.startup")


# ---------------------------------------------------------------------------
# Structured logging
# ---------------------------------------------------------------------------

def _configure_logging(settings: Settings) -> None:
    """Configure structured JSON logging when log_format=json (default)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # create_app may run more than once per process (tests, reloads)
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    if settings.log_format == "json":
        handler.setFormatter(JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        ))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root.addHandler(handler)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

def _gate_error_handler(request: Request, exc: GateError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimited):
        headers = {"Retry-After": str(exc.reset_in_seconds)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    failed = ValidationFailed(details=jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=failed.status_code, content=failed.to_payload())


def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    settings: Settings = request.app.state.settings
    logging.getLogger("gate.errors").exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "message": str(exc) if settings.environment == "development" else "An error occurred",
        },
    )


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    clock: Callable[[], float] = time.time,
    limiter_clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
    """
    Build the gate service.

    Raises ConfigurationMissing when no password is configured, so a
    misconfigured process dies before it serves a single request.
    """
    settings = settings or get_settings()
    _configure_logging(settings)

    gate = Gate.from_settings(settings, clock=clock, limiter_clock=limiter_clock)

    app = FastAPI(
        title="Dashboard Gate",
        version=__version__,
        description=(
            "Single-password access gate for the reporting dashboard. "
            "Issues stateless HMAC-signed session cookies behind a "
            "rate-limited password check."
        ),
        docs_url="/docs" if settings.environment == "development" else None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.gate = gate
    app.state.session_cookie = SessionCookie.from_settings(settings)

    # Rate limiting: one budget per app, shared by every route not exempted
    app.state.limiter = build_limiter(settings)
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(GateError, _gate_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    # Credentialed CORS: only whitelisted origins, in every environment
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(auth_router)

    @app.get("/health", response_model=HealthResponse, tags=["meta"])
    def health() -> HealthResponse:
        return HealthResponse(
            timestamp=datetime.now(timezone.utc).isoformat(),
            environment=settings.environment,
            service=SERVICE_NAME,
            version=__version__,
            checks={
                "masterPassword": True,
                "persistentSessionSecret": gate.key.persistent,
            },
        )

    app.state.limiter.exempt(health)

    log.info(
        "Gate ready: ttl=%sd, %d attempts per %d min, persistent signing key=%s",
        settings.session_ttl_days,
        settings.login_max_attempts,
        settings.login_window_minutes,
        gate.key.persistent,
    )
    return app
