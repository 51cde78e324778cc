"""
Tests for settings loading, validation and fatal startup configuration.

Run with: pytest tests/test_config.py -v
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from dashboard_gate.config import Settings
from dashboard_gate.exceptions import ConfigurationMissing
from dashboard_gate.main import create_app


def test_defaults():
    s = Settings(_env_file=None)
    assert s.session_ttl_days == 7
    assert s.session_ttl_seconds == 7 * 24 * 60 * 60
    assert s.session_cookie_name == "session"
    assert s.login_max_attempts == 5
    assert s.login_window_minutes == 15


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("GATE_MASTER_PASSWORD", "from-env")
    monkeypatch.setenv("GATE_SESSION_TTL_DAYS", "3")
    monkeypatch.setenv("GATE_ALLOW_CORS_ORIGINS", '["https://dash.example.com"]')
    s = Settings(_env_file=None)
    assert s.master_password == "from-env"
    assert s.session_ttl_days == 3
    assert s.allow_cors_origins == ["https://dash.example.com"]


@pytest.mark.parametrize("field", [
    "session_ttl_days",
    "login_max_attempts",
    "login_window_minutes",
    "login_tracker_max_entries",
])
def test_non_positive_values_rejected(field):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: 0})


def test_unknown_log_format_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_format="xml")


class TestSecureCookies:
    def test_off_in_development(self):
        assert Settings(_env_file=None).secure_cookies is False

    def test_on_in_production(self):
        assert Settings(_env_file=None, environment="production").secure_cookies is True

    def test_explicit_override_wins(self):
        s = Settings(_env_file=None, environment="production", cookie_secure=False)
        assert s.secure_cookies is False


def test_missing_password_aborts_startup():
    with pytest.raises(ConfigurationMissing, match="GATE_MASTER_PASSWORD"):
        create_app(Settings(_env_file=None, master_password="", log_format="text"))


def test_missing_secret_key_is_a_startup_warning(caplog):
    settings = Settings(_env_file=None, master_password="p", session_secret_key="", log_format="text")
    with caplog.at_level("WARNING"):
        create_app(settings)
    assert any(
        r.name == "gate.tokens" and r.levelname == "WARNING" for r in caplog.records
    )
