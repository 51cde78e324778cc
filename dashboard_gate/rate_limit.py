"""
rate_limit.py — Caller identity and coarse API throttling
=========================================================
``client_identity`` names the caller for both the login attempt limiter
and slowapi. slowapi enforces a broad per-client request budget shared by
the auth endpoints (default 100 per 15 minutes) on top of the much
stricter password attempt window kept by the Gate.

Each app gets its own ``Limiter`` built from its own settings, applied
through ``SlowAPIMiddleware``; routes opt out with ``limiter.exempt``.
"""
from __future__ import annotations

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import Settings, get_settings


def client_identity(request: Request) -> str:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return get_remote_address(request) or "unknown"


def build_limiter(settings: Settings) -> Limiter:
    # In-memory storage, so every app instance counts on its own.
    return Limiter(
        key_func=client_identity,
        application_limits=[settings.api_rate_limit],
        storage_uri="memory://",
    )
