"""Signed session tokens (JWT)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from marketplace.core.config import Settings, get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded (bad signature, expired, malformed claims)."""


@dataclass(frozen=True)
class Identity:
    """Claims carried by a session token."""

    id: str
    username: str
    email: str
    role: str

    def to_dict(self) -> dict:
        return asdict(self)


def issue_token(identity: Identity, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    claims = identity.to_dict()
    claims["exp"] = datetime.now(timezone.utc) + timedelta(seconds=settings.jwt_ttl_seconds)
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Optional[Settings] = None) -> Identity:
    settings = settings or get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise TokenError(str(exc)) from exc
    try:
        return Identity(
            id=str(claims["id"]),
            username=str(claims["username"]),
            email=str(claims["email"]),
            role=str(claims["role"]),
        )
    except KeyError as exc:
        raise TokenError(f"missing claim {exc.args[0]}") from exc
