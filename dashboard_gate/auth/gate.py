"""
gate.py — Single-password session gate
======================================
Orchestrates the attempt limiter, the credential check and the token
issuer/verifier behind three operations:

  handle_verify  password  → IssuedSession, or RateLimited / InvalidCredentials
  handle_status  token     → SessionStatus (never raises)
  handle_logout            → nothing to do server-side

The Gate owns every piece of mutable state it needs (the attempt table and
the signing key). It is built once at startup and hung off ``app.state``.

Logout is stateless: it only tells the client to drop its cookie. A token
value that was copied elsewhere keeps passing ``handle_status`` until it
expires or the signing key is rotated. Revoking individual tokens would
need a denylist, which this gate does not keep.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import Settings
from ..exceptions import InvalidCredentials, RateLimited
from .attempts import LoginAttemptLimiter
from .credentials import CredentialVerifier
from .tokens import SigningKey, TokenIssuer, TokenVerifier

logger = logging.getLogger("gate.auth")

NO_SESSION_COOKIE = "NoSessionCookie"


@dataclass
class IssuedSession:
    token: str
    expires_in_ms: int


@dataclass
class SessionStatus:
    authenticated: bool
    expires_at: Optional[int] = None
    remaining_time: Optional[int] = None
    reason: Optional[str] = None


class Gate:
    def __init__(
        self,
        credentials: CredentialVerifier,
        limiter: LoginAttemptLimiter,
        issuer: TokenIssuer,
        verifier: TokenVerifier,
        key: SigningKey,
        ttl_seconds: int,
    ) -> None:
        self.credentials = credentials
        self.limiter = limiter
        self.issuer = issuer
        self.verifier = verifier
        self.key = key
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        clock: Callable[[], float] = time.time,
        limiter_clock: Callable[[], float] = time.monotonic,
    ) -> "Gate":
        """Build the gate for a process. Raises ConfigurationMissing without a password."""
        password = settings.require_master_password()
        key = SigningKey.from_config(settings.session_secret_key)
        return cls(
            credentials=CredentialVerifier(password),
            limiter=LoginAttemptLimiter(
                max_attempts=settings.login_max_attempts,
                window_seconds=settings.login_window_minutes * 60,
                max_entries=settings.login_tracker_max_entries,
                clock=limiter_clock,
            ),
            issuer=TokenIssuer(key, clock=clock),
            verifier=TokenVerifier(key, clock=clock),
            key=key,
            ttl_seconds=settings.session_ttl_seconds,
        )

    def handle_verify(self, secret: object, identity: str) -> IssuedSession:
        decision = self.limiter.check(identity)
        if not decision.allowed:
            raise RateLimited(decision.reset_in_seconds)

        if not self.credentials.verify(secret):
            logger.warning(
                "Invalid password from %s (%d attempts left)",
                identity, decision.remaining_attempts,
            )
            raise InvalidCredentials(decision.remaining_attempts)

        token = self.issuer.issue(self.ttl_seconds)
        logger.info("Session issued for %s", identity)
        return IssuedSession(token=token, expires_in_ms=self.ttl_seconds * 1000)

    def handle_status(self, token: Optional[str]) -> SessionStatus:
        if not token:
            return SessionStatus(authenticated=False, reason=NO_SESSION_COOKIE)

        result = self.verifier.verify(token)
        if not result.valid:
            return SessionStatus(authenticated=False, reason=result.error_kind)
        return SessionStatus(
            authenticated=True,
            expires_at=result.expires_at,
            remaining_time=result.remaining_time,
        )

    def handle_logout(self) -> None:
        logger.debug("Logout requested; clearing client cookie only")
