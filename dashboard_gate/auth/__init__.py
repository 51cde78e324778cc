from .attempts import LoginAttemptLimiter, RateLimitDecision
from .credentials import CredentialVerifier, constant_time_equals
from .gate import Gate, IssuedSession, SessionStatus
from .tokens import SigningKey, TokenIssuer, TokenVerification, TokenVerifier

__all__ = [
    "CredentialVerifier",
    "Gate",
    "IssuedSession",
    "LoginAttemptLimiter",
    "RateLimitDecision",
    "SessionStatus",
    "SigningKey",
    "TokenIssuer",
    "TokenVerification",
    "TokenVerifier",
    "constant_time_equals",
]
