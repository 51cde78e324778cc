"""
pytest configuration – controllable clocks, gate settings and a client
per test. Every app carries its own API throttle, so nothing is shared
between tests.
"""
import pytest
from fastapi.testclient import TestClient

from dashboard_gate.config import Settings
from dashboard_gate.main import create_app

PASSWORD = "hunter2"
SECRET_KEY = "test-signing-key-0123456789abcdef"
T0 = 1_760_000_000.0  # epoch seconds


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: float = T0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        master_password=PASSWORD,
        session_secret_key=SECRET_KEY,
        session_ttl_days=7,
        log_format="text",
    )


@pytest.fixture
def app(settings, clock):
    return create_app(settings, clock=clock, limiter_clock=clock)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
