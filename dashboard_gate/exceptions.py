"""
exceptions.py — Error kinds raised by the session gate
======================================================
Every error carries a ``kind`` string. Token errors never leave the Gate:
their kind becomes the ``reason`` reported by the status operation.
Credential and rate-limit errors reach the HTTP boundary, where handlers
registered in ``main`` turn them into JSON responses.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional


class GateError(Exception):
    kind = "GateError"
    status_code = 500

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": str(self)}


class ConfigurationMissing(GateError):
    """Required configuration is absent. Raised at startup only."""

    kind = "ConfigurationMissing"


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------

class TokenError(GateError):
    status_code = 401


class MalformedToken(TokenError):
    kind = "MalformedToken"


class InvalidSignature(TokenError):
    kind = "InvalidSignature"


class TokenExpired(TokenError):
    kind = "Expired"


# ---------------------------------------------------------------------------
# Credential verification
# ---------------------------------------------------------------------------

class InvalidCredentials(GateError):
    kind = "InvalidCredentials"
    status_code = 401

    def __init__(self, remaining_attempts: int) -> None:
        super().__init__("Invalid password")
        self.remaining_attempts = remaining_attempts

    def to_payload(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": "Invalid password",
            "remainingAttempts": self.remaining_attempts,
        }


class RateLimited(GateError):
    kind = "RateLimited"
    status_code = 429

    def __init__(self, reset_in_seconds: int) -> None:
        super().__init__("Too many attempts")
        self.reset_in_seconds = reset_in_seconds

    @property
    def reset_in_minutes(self) -> int:
        return max(1, math.ceil(self.reset_in_seconds / 60))

    def to_payload(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": "Too many attempts",
            "message": f"Please try again in {self.reset_in_minutes} minutes",
            "retryAfter": self.reset_in_seconds,
        }


class ValidationFailed(GateError):
    kind = "ValidationFailed"
    status_code = 400

    def __init__(self, details: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__("Validation failed")
        self.details = details or []

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": "Validation failed", "details": self.details}
