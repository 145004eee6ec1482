"""
Configuration helpers for the marketplace backend.

Routers/services read a typed Settings object instead of fetching
os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    redis_url: str
    jwt_secret: str
    jwt_algorithm: str
    jwt_ttl_seconds: int
    cookie_max_age_seconds: int
    cookie_secure: bool
    revocation_ttl_seconds: int
    imagekit_public_key: str
    imagekit_private_key: str
    imagekit_url_endpoint: str
    imagekit_upload_url: str
    imagekit_folder: str
    imagekit_timeout_seconds: float
    products_allow_seller_field: bool
    auth_enforce_revocation: bool
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./marketplace.db"),
        redis_url=os.getenv("REDIS_URL", ""),
        jwt_secret=os.getenv("JWT_SECRET", "change-me"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_ttl_seconds=_int(os.getenv("JWT_TTL_SECONDS", "3600"), 3600),
        cookie_max_age_seconds=_int(os.getenv("COOKIE_MAX_AGE_SECONDS", "86400"), 86400),
        cookie_secure=_bool(os.getenv("COOKIE_SECURE"), True),
        revocation_ttl_seconds=_int(os.getenv("REVOCATION_TTL_SECONDS", "86400"), 86400),
        imagekit_public_key=os.getenv("IMAGEKIT_PUBLIC_KEY", ""),
        imagekit_private_key=os.getenv("IMAGEKIT_PRIVATE_KEY", ""),
        imagekit_url_endpoint=os.getenv("IMAGEKIT_URL_ENDPOINT", ""),
        imagekit_upload_url=os.getenv("IMAGEKIT_UPLOAD_URL", "https://upload.imagekit.io/api/v1/files/upload"),
        imagekit_folder=os.getenv("IMAGEKIT_FOLDER", "/products"),
        imagekit_timeout_seconds=_float(os.getenv("IMAGEKIT_TIMEOUT_SECONDS", "30"), 30.0),
        products_allow_seller_field=_bool(os.getenv("PRODUCTS_ALLOW_SELLER_FIELD"), False),
        auth_enforce_revocation=_bool(os.getenv("AUTH_ENFORCE_REVOCATION"), False),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
