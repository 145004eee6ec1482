"""Session helpers (token extraction, route guards, cookies)."""
from __future__ import annotations

from typing import Callable, Iterable, Optional

from fastapi import Request, Response

from marketplace.core.config import Settings, get_settings
from marketplace.core.errors import AuthError, ForbiddenError
from marketplace.core.tokens import Identity, TokenError, decode_token

SESSION_COOKIE_NAME = "token"


def app_settings(request: Request) -> Settings:
    """Settings the running app was built with, falling back to the environment."""
    return getattr(request.app.state, "settings", None) or get_settings()


def extract_token(request: Request) -> str | None:
    """Return the session token from the cookie or an ``Authorization: Bearer`` header."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("authorization") or ""
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def require_auth(
    roles: Optional[Iterable[str]] = None,
    *,
    optional: bool = False,
) -> Callable[[Request], Optional[Identity]]:
    """
    Build a route dependency that resolves the caller's identity.

    No token -> 401 (or None when ``optional``); bad signature, expiry or a
    role outside ``roles`` -> 403. The revocation list is only consulted when
    AUTH_ENFORCE_REVOCATION is on.
    """
    allowed = frozenset(roles) if roles else None

    def dependency(request: Request) -> Optional[Identity]:
        token = extract_token(request)
        if not token:
            if optional:
                return None
            raise AuthError("Unauthorized")
        settings = app_settings(request)
        try:
            identity = decode_token(token, settings)
        except TokenError:
            raise ForbiddenError("Invalid or expired token")
        if allowed is not None and identity.role not in allowed:
            raise ForbiddenError("Access denied: insufficient permissions")
        if settings.auth_enforce_revocation:
            revocation = getattr(request.app.state, "revocation", None)
            if revocation is not None and revocation.is_revoked(token):
                raise ForbiddenError("Token has been revoked")
        request.state.user = identity
        return identity

    return dependency


def set_session_cookie(response: Response, token: str, settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        max_age=settings.cookie_max_age_seconds,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
