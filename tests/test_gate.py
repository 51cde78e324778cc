"""
Tests for the Gate orchestration (no HTTP).

Run with: pytest tests/test_gate.py -v
"""
from __future__ import annotations

import pytest

from dashboard_gate.auth.gate import Gate
from dashboard_gate.config import Settings
from dashboard_gate.exceptions import ConfigurationMissing, InvalidCredentials, RateLimited

IDENTITY = "203.0.113.7"


@pytest.fixture
def gate(settings, clock) -> Gate:
    return Gate.from_settings(settings, clock=clock, limiter_clock=clock)


# ---------------------------------------------------------------------------
# handle_verify
# ---------------------------------------------------------------------------

class TestHandleVerify:
    def test_correct_password_issues_session(self, gate):
        issued = gate.handle_verify("hunter2", IDENTITY)
        assert issued.token
        assert issued.expires_in_ms == 7 * 24 * 60 * 60 * 1000

    def test_wrong_password_reports_remaining_attempts(self, gate):
        with pytest.raises(InvalidCredentials) as exc_info:
            gate.handle_verify("wrong", IDENTITY)
        assert exc_info.value.remaining_attempts == 4
        assert exc_info.value.to_payload() == {
            "success": False,
            "error": "Invalid password",
            "remainingAttempts": 4,
        }

    def test_non_string_secret_is_invalid_credentials(self, gate):
        with pytest.raises(InvalidCredentials):
            gate.handle_verify(None, IDENTITY)

    def test_sixth_attempt_is_rate_limited_even_with_correct_password(self, gate, clock):
        remaining = []
        for _ in range(5):
            with pytest.raises(InvalidCredentials) as exc_info:
                gate.handle_verify("wrong", IDENTITY)
            remaining.append(exc_info.value.remaining_attempts)
            clock.advance(10)
        assert remaining == [4, 3, 2, 1, 0]

        with pytest.raises(RateLimited) as exc_info:
            gate.handle_verify("hunter2", IDENTITY)
        assert exc_info.value.reset_in_seconds == 15 * 60 - 50
        assert exc_info.value.to_payload()["message"] == "Please try again in 15 minutes"

    def test_window_elapsing_lets_the_caller_back_in(self, gate, clock):
        for _ in range(5):
            with pytest.raises(InvalidCredentials):
                gate.handle_verify("wrong", IDENTITY)
        clock.advance(15 * 60 + 1)
        assert gate.handle_verify("hunter2", IDENTITY).token

    def test_successful_logins_also_consume_attempts(self, gate):
        for _ in range(5):
            gate.handle_verify("hunter2", IDENTITY)
        with pytest.raises(RateLimited):
            gate.handle_verify("hunter2", IDENTITY)


# ---------------------------------------------------------------------------
# handle_status / handle_logout
# ---------------------------------------------------------------------------

class TestHandleStatus:
    def test_no_token(self, gate):
        status = gate.handle_status(None)
        assert status.authenticated is False
        assert status.reason == "NoSessionCookie"

    def test_empty_token_counts_as_missing(self, gate):
        assert gate.handle_status("").reason == "NoSessionCookie"

    def test_fresh_session_is_authenticated(self, gate, clock):
        token = gate.handle_verify("hunter2", IDENTITY).token
        clock.advance(30)
        status = gate.handle_status(token)
        assert status.authenticated is True
        assert status.remaining_time == gate.ttl_seconds * 1000 - 30_000
        assert status.reason is None

    def test_expired_session_falls_back_quietly(self, gate, clock):
        token = gate.handle_verify("hunter2", IDENTITY).token
        clock.advance(gate.ttl_seconds + 1)
        status = gate.handle_status(token)
        assert status.authenticated is False
        assert status.reason == "Expired"

    def test_garbage_token(self, gate):
        assert gate.handle_status("%%%").reason == "MalformedToken"

    def test_logout_does_not_revoke_retained_token(self, gate):
        token = gate.handle_verify("hunter2", IDENTITY).token
        gate.handle_logout()
        assert gate.handle_status(token).authenticated is True


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def test_missing_password_is_fatal():
    with pytest.raises(ConfigurationMissing):
        Gate.from_settings(Settings(_env_file=None, master_password="", session_secret_key="k"))


def test_missing_secret_key_makes_key_ephemeral():
    gate = Gate.from_settings(Settings(_env_file=None, master_password="p", session_secret_key=""))
    assert gate.key.persistent is False


def test_limits_follow_settings(clock):
    settings = Settings(
        _env_file=None,
        master_password="p",
        session_secret_key="k",
        login_max_attempts=2,
        login_window_minutes=1,
    )
    gate = Gate.from_settings(settings, clock=clock, limiter_clock=clock)
    for _ in range(2):
        with pytest.raises(InvalidCredentials):
            gate.handle_verify("x", IDENTITY)
    with pytest.raises(RateLimited) as exc_info:
        gate.handle_verify("p", IDENTITY)
    assert exc_info.value.reset_in_seconds == 60
