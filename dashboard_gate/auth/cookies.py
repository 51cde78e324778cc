from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request, Response

from ..config import Settings


@dataclass(frozen=True)
class SessionCookie:
    """How the session token travels: HttpOnly, SameSite=Strict, Path=/."""

    name: str
    max_age: int
    secure: bool
    path: str = "/"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionCookie":
        return cls(
            name=settings.session_cookie_name,
            max_age=settings.session_ttl_seconds,
            secure=settings.secure_cookies,
        )

    def set(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.name,
            value=token,
            max_age=self.max_age,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite="strict",
        )

    def clear(self, response: Response) -> None:
        # Overwrite with an empty, already-expired cookie. The token bytes
        # themselves stay valid until expiry if the client kept a copy.
        response.set_cookie(
            key=self.name,
            value="",
            max_age=0,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite="strict",
        )

    def read(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.name) or None
