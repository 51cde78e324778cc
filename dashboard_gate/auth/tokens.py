"""
tokens.py — Stateless signed session tokens
===========================================
A session token is ``issued_at:expires_at:signature`` (milliseconds since
the epoch, hex HMAC-SHA256 over the first two fields), base64url encoded
without padding so it can travel in a cookie unquoted.

Nothing about issued tokens is stored. Validity is recomputed from the
token's own bytes and the signing key, so rotating the key invalidates
every outstanding session.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..exceptions import InvalidSignature, MalformedToken, TokenError, TokenExpired

logger = logging.getLogger("gate.tokens")

_SEPARATOR = b":"


# ---------------------------------------------------------------------------
# Signing key
# ---------------------------------------------------------------------------

class SigningKey:
    """Process-wide HMAC key. Written once at startup, read-only afterwards."""

    def __init__(self, secret: bytes, persistent: bool = True) -> None:
        if not secret:
            raise ValueError("Signing key must not be empty.")
        self._secret = secret
        self.persistent = persistent

    @classmethod
    def generate(cls) -> "SigningKey":
        return cls(secrets.token_bytes(32), persistent=False)

    @classmethod
    def from_config(cls, configured: str) -> "SigningKey":
        """Use the configured secret, or fall back to a per-process random key."""
        if configured:
            return cls(configured.encode("utf-8"))
        logger.warning(
            "GATE_SESSION_SECRET_KEY not set, using an auto-generated signing key. "
            "Sessions only last as long as this process: a restart logs everyone out."
        )
        return cls.generate()

    def sign(self, payload: bytes) -> bytes:
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest().encode("ascii")

    def __repr__(self) -> str:
        return f"SigningKey(persistent={self.persistent})"


# ---------------------------------------------------------------------------
# Token model and codec
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SessionToken:
    issued_at: bytes
    expires_at: bytes
    signature: bytes

    @property
    def payload(self) -> bytes:
        return self.issued_at + _SEPARATOR + self.expires_at

    def encode(self) -> str:
        raw = _SEPARATOR.join((self.issued_at, self.expires_at, self.signature))
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    @classmethod
    def decode(cls, token: str) -> "SessionToken":
        try:
            padded = token.encode("ascii") + b"=" * (-len(token) % 4)
            raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        except (UnicodeEncodeError, binascii.Error, ValueError) as exc:
            raise MalformedToken("Token is not valid base64.") from exc

        parts = raw.split(_SEPARATOR)
        if len(parts) != 3:
            raise MalformedToken("Token does not have three fields.")
        return cls(*parts)


@dataclass
class TokenVerification:
    valid: bool
    expires_at: Optional[int] = None
    remaining_time: Optional[int] = None
    error_kind: Optional[str] = None


def _now_ms(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


# ---------------------------------------------------------------------------
# Issue / verify
# ---------------------------------------------------------------------------

class TokenIssuer:
    def __init__(self, key: SigningKey, clock: Callable[[], float] = time.time) -> None:
        self._key = key
        self._clock = clock

    def issue(self, ttl_seconds: float) -> str:
        issued_at = _now_ms(self._clock)
        expires_at = issued_at + int(ttl_seconds * 1000)
        issued, expires = str(issued_at).encode("ascii"), str(expires_at).encode("ascii")
        signature = self._key.sign(issued + _SEPARATOR + expires)
        return SessionToken(issued, expires, signature).encode()


class TokenVerifier:
    def __init__(self, key: SigningKey, clock: Callable[[], float] = time.time) -> None:
        self._key = key
        self._clock = clock

    def check(self, token: str) -> SessionToken:
        """Decode and validate ``token``; raises a ``TokenError`` subclass on failure."""
        decoded = SessionToken.decode(token)

        # Signature first: a tampered expiry must fail here, never as Expired.
        # Only the canonical encoding of the signed bytes is accepted, so a
        # changed trailing character or '+'/'/'/'=' look-alike cannot pass.
        expected = self._key.sign(decoded.payload)
        canonical = hmac.compare_digest(decoded.encode().encode("ascii"), token.encode("ascii"))
        if not canonical or not hmac.compare_digest(expected, decoded.signature):
            raise InvalidSignature("Token signature does not match.")

        if _now_ms(self._clock) > int(decoded.expires_at):
            raise TokenExpired("Token expired.")
        return decoded

    def verify(self, token: str) -> TokenVerification:
        try:
            decoded = self.check(token)
        except TokenError as exc:
            if isinstance(exc, InvalidSignature):
                logger.warning("Rejected session token with an invalid signature")
            else:
                logger.debug("Rejected session token: %s", exc.kind)
            return TokenVerification(valid=False, error_kind=exc.kind)

        expires_at = int(decoded.expires_at)
        return TokenVerification(
            valid=True,
            expires_at=expires_at,
            remaining_time=expires_at - _now_ms(self._clock),
        )
