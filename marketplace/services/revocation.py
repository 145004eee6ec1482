"""Token revocation list kept in Redis.

Logged-out tokens are stored under their raw value with a TTL. Entries are
advisory: a revoked token stays cryptographically valid until it expires,
and only callers that ask ``is_revoked`` will notice the entry.
"""
from __future__ import annotations

import logging
from typing import Optional

import redis

logger = logging.getLogger(__name__)

REVOKED_VALUE = "revoked"


class RevocationList:
    def __init__(self, client: Optional[redis.Redis] = None, *, default_ttl: int = 86400) -> None:
        self._client = client
        self._default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str, *, default_ttl: int = 86400) -> "RevocationList":
        """Build from a redis:// URL; an empty URL yields a list that stores nothing."""
        url = (url or "").strip()
        if not url:
            logger.warning("REDIS_URL not configured; logout will not record revoked tokens")
            return cls(None, default_ttl=default_ttl)
        return cls(redis.Redis.from_url(url, decode_responses=True), default_ttl=default_ttl)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def revoke(self, token: str, ttl_seconds: Optional[int] = None) -> bool:
        """Record ``token`` as revoked. Returns False when nothing was stored."""
        if not token or self._client is None:
            return False
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        self._client.set(token, REVOKED_VALUE, ex=ttl)
        return True

    def is_revoked(self, token: str) -> bool:
        if not token or self._client is None:
            return False
        return self._client.get(token) is not None

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
