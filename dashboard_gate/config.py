from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationMissing


class Settings(BaseSettings):
    # Server
    environment: str = "development"
    log_level: str = "info"
    log_format: str = "json"
    allow_cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    host: str = "0.0.0.0"
    port: int = 3002

    # Gate
    master_password: str = ""
    session_secret_key: str = ""
    session_ttl_days: int = 7
    session_cookie_name: str = "session"
    cookie_secure: Optional[bool] = None  # None = Secure only in production

    # Login attempt limiting (fixed window, per client)
    login_max_attempts: int = 5
    login_window_minutes: int = 15
    login_tracker_max_entries: int = 10_000

    # Coarse per-client throttle on the auth API
    api_rate_limit: str = "100 per 15 minutes"
    trust_forwarded_for: bool = False

    model_config = SettingsConfigDict(env_prefix="GATE_", env_file=".env", extra="ignore")

    @field_validator(
        "session_ttl_days",
        "login_max_attempts",
        "login_window_minutes",
        "login_tracker_max_entries",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be a positive integer.")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'.")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def secure_cookies(self) -> bool:
        if self.cookie_secure is not None:
            return self.cookie_secure
        return self.is_production

    @property
    def session_ttl_seconds(self) -> int:
        return self.session_ttl_days * 24 * 60 * 60

    def require_master_password(self) -> str:
        """Return the shared password or abort startup if none is configured."""
        if not self.master_password:
            raise ConfigurationMissing(
                "GATE_MASTER_PASSWORD is not set. The gate cannot start without "
                "a configured password."
            )
        return self.master_password


@lru_cache
def get_settings() -> Settings:
    return Settings()
