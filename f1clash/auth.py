"""Admin session detection from request cookies."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

__all__ = ["AuthStatus", "get_cookie"]

SESSION_COOKIE = "admin_session"


def _cookie_header(headers: Mapping[str, str]) -> str | None:
    for key, value in headers.items():
        if key.lower() == "cookie":
            if all(ch == "\t" or " " <= ch <= "~" for ch in value):
                return value
            return None
    return None


def get_cookie(headers: Mapping[str, str], name: str) -> str | None:
    """Value of the named cookie in the Cookie header, or None."""
    cookie_header = _cookie_header(headers)
    if cookie_header is None:
        return None
    prefix = f"{name}="
    return next(
        (item[len(prefix):] for item in cookie_header.split("; ") if item.startswith(prefix)),
        None,
    )


@dataclass(frozen=True)
class AuthStatus:
    """Whether auth is enabled and whether the request is authenticated."""

    enabled: bool
    logged_in: bool

    @classmethod
    def from_headers(cls, headers: Mapping[str, str], session_token: str | None) -> AuthStatus:
        """Auth is enabled when a session token is configured."""
        if session_token is None:
            return cls(enabled=False, logged_in=False)
        return cls(enabled=True, logged_in=get_cookie(headers, SESSION_COOKIE) == session_token)