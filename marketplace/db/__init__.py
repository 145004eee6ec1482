"""Database helpers (engine/session export)."""

from .session import Base, build_engine, dispose_engine, get_engine, get_session, session_factory

__all__ = ["Base", "build_engine", "dispose_engine", "get_engine", "get_session", "session_factory"]
