from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from .cookies import SessionCookie
from .gate import Gate, SessionStatus


def get_gate(request: Request) -> Gate:
    return request.app.state.gate


def get_session_cookie(request: Request) -> SessionCookie:
    return request.app.state.session_cookie


def get_session_status(
    request: Request,
    gate: Gate = Depends(get_gate),
    cookie: SessionCookie = Depends(get_session_cookie),
) -> SessionStatus:
    return gate.handle_status(cookie.read(request))


# ---------------------------------------------------------------------------
# Guard for dashboard routes mounted next to the gate
# ---------------------------------------------------------------------------

def require_session(session: SessionStatus = Depends(get_session_status)) -> SessionStatus:
    """Let the request through only with a valid session cookie; 401 otherwise."""
    if not session.authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"authenticated": False, "reason": session.reason},
        )
    return session
