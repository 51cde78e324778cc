from fastapi import APIRouter, Depends, Request, Response

from ..rate_limit import client_identity
from ..schemas import LogoutResponse, StatusResponse, VerifyRequest, VerifyResponse
from .cookies import SessionCookie
from .dependencies import get_gate, get_session_cookie, get_session_status
from .gate import Gate, SessionStatus

router = APIRouter(prefix="/api/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# Verify password → session cookie
# ---------------------------------------------------------------------------

@router.post("/verify", response_model=VerifyResponse)
def verify(
    request: Request,
    response: Response,
    body: VerifyRequest,
    gate: Gate = Depends(get_gate),
    cookie: SessionCookie = Depends(get_session_cookie),
) -> VerifyResponse:
    # RateLimited / InvalidCredentials propagate to the handlers in main.
    issued = gate.handle_verify(body.password, client_identity(request))
    cookie.set(response, issued.token)
    return VerifyResponse(expires_in=issued.expires_in_ms)


# ---------------------------------------------------------------------------
# Session status
# ---------------------------------------------------------------------------

@router.get(
    "/status",
    response_model=StatusResponse,
    response_model_exclude_none=True,
)
def session_status(
    session: SessionStatus = Depends(get_session_status),
) -> StatusResponse:
    return StatusResponse(
        authenticated=session.authenticated,
        expires_at=session.expires_at,
        remaining_time=session.remaining_time,
        reason=session.reason,
    )


# ---------------------------------------------------------------------------
# Logout — clears the client cookie; always succeeds
# ---------------------------------------------------------------------------

@router.api_route("/logout", methods=["GET", "POST"], response_model=LogoutResponse)
def logout(
    response: Response,
    gate: Gate = Depends(get_gate),
    cookie: SessionCookie = Depends(get_session_cookie),
) -> LogoutResponse:
    gate.handle_logout()
    cookie.clear(response)
    return LogoutResponse()
