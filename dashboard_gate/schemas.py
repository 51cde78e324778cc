from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Verify
# ---------------------------------------------------------------------------

class VerifyRequest(BaseModel):
    password: StrictStr = Field(..., min_length=1, description="The shared dashboard password.")


class VerifyResponse(_CamelModel):
    success: bool = True
    message: str = "Authentication successful"
    expires_in: int = Field(..., description="Session lifetime in milliseconds.")


# ---------------------------------------------------------------------------
# Status / logout
# ---------------------------------------------------------------------------

class StatusResponse(_CamelModel):
    authenticated: bool
    expires_at: Optional[int] = Field(default=None, description="Expiry, ms since the epoch.")
    remaining_time: Optional[int] = Field(default=None, description="Milliseconds until expiry.")
    reason: Optional[str] = None


class LogoutResponse(_CamelModel):
    success: bool = True
    message: str = "Logged out successfully"


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class HealthResponse(_CamelModel):
    status: str = "ok"
    timestamp: str
    environment: str
    service: str
    version: str
    checks: Dict[str, bool]
