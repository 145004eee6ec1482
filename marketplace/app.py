from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from marketplace.core.config import Settings, get_settings
from marketplace.core.errors import ServiceError, request_validation_handler, service_error_handler
from marketplace.core.log import configure_logging
from marketplace.db import build_engine, session_factory
from marketplace.db.create_tables import create_all
from marketplace.repositories.sql_repository import SQLRepository
from marketplace.routers import auth as auth_router
from marketplace.routers import products as products_router
from marketplace.services.auth_service import AuthService
from marketplace.services.image_host import ImageKitClient
from marketplace.services.product_service import ProductService
from marketplace.services.revocation import RevocationList

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers on every JSON response."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _cors_origins(settings: Settings) -> list[str]:
    allowed = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed.update(
            {
                "http://localhost:3000",
                "http://127.0.0.1:3000",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            }
        )
    return sorted(origin for origin in allowed if origin)


def create_app(
    *,
    include_auth: bool = True,
    include_products: bool = True,
    settings: Optional[Settings] = None,
    repository: Optional[SQLRepository] = None,
    revocation: Optional[RevocationList] = None,
    image_host: Optional[ImageKitClient] = None,
) -> FastAPI:
    """
    Build the API with explicitly constructed collaborators.

    Anything not passed in is built from ``settings``, the database engine
    included; clients owned by the app are closed when it shuts down. An
    injected repository brings its own storage and schema.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    engine = None
    if repository is None:
        engine = build_engine(settings.database_url)
        repository = SQLRepository(session_factory=session_factory(engine))
    revocation = revocation or RevocationList.from_url(settings.redis_url, default_ttl=settings.revocation_ttl_seconds)
    if include_products and image_host is None:
        image_host = ImageKitClient.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if engine is not None:
            create_all(engine)
        logger.info("marketplace API started (env=%s)", settings.app_env)
        try:
            yield
        finally:
            revocation.close()
            if image_host is not None:
                await image_host.aclose()
            if engine is not None:
                engine.dispose()

    app = FastAPI(title="Marketplace API", lifespan=lifespan)
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    origins = _cors_origins(settings)
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.state.settings = settings
    app.state.revocation = revocation
    if include_auth:
        app.state.auth_service = AuthService(repository=repository, revocation=revocation, settings=settings)
        app.include_router(auth_router.router)
    if include_products:
        app.state.product_service = ProductService(image_host=image_host, repository=repository, settings=settings)
        app.include_router(products_router.router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


def create_auth_app(**kwargs) -> FastAPI:
    return create_app(include_auth=True, include_products=False, **kwargs)


def create_product_app(**kwargs) -> FastAPI:
    return create_app(include_auth=False, include_products=True, **kwargs)
