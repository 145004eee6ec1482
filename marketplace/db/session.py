"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

from contextlib import AbstractContextManager, contextmanager
from functools import lru_cache
from typing import Callable, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from marketplace.core.config import get_settings

Base = declarative_base()

SessionFactory = Callable[[], AbstractContextManager[Session]]


def build_engine(database_url: str) -> Engine:
    url = (database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    return create_engine(url, future=True, pool_pre_ping=True)


def _sessionmaker_for(engine: Engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


def session_factory(engine: Engine) -> SessionFactory:
    """Context-managed sessions bound to ``engine`` rather than the environment."""
    maker = _sessionmaker_for(engine)

    @contextmanager
    def _session() -> Iterator[Session]:
        session: Session = maker()
        try:
            yield session
        finally:
            session.close()

    return _session


@lru_cache
def get_engine() -> Engine:
    return build_engine(get_settings().database_url)


@lru_cache
def _get_sessionmaker():
    return _sessionmaker_for(get_engine())


@contextmanager
def get_session() -> Iterator[Session]:
    session: Session = _get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


def dispose_engine() -> None:
    """Close pooled connections and forget the cached engine/sessionmaker."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
    _get_sessionmaker.cache_clear()
    get_engine.cache_clear()
