"""Run the gate under uvicorn: ``python -m dashboard_gate``."""
from __future__ import annotations

import logging
import sys

import uvicorn

from .config import get_settings
from .exceptions import ConfigurationMissing
from .main import create_app


def main() -> int:
    settings = get_settings()
    try:
        app = create_app(settings)
    except ConfigurationMissing as exc:
        print(f"\n🚨 FATAL: {exc}\n", file=sys.stderr)
        return 1

    log = logging.getLogger("gate.startup")
    base = f"http://{settings.host}:{settings.port}"
    log.info("Endpoints: POST %s/api/auth/verify, GET %s/api/auth/status, "
             "POST %s/api/auth/logout, GET %s/health", base, base, base, base)

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)
    return 0


if __name__ == "__main__":
    sys.exit(main())
