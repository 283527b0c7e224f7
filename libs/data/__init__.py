"""Database helpers, SQLAlchemy models, and repository utilities."""

from .database import get_async_session, get_session_factory

__all__ = ["get_async_session", "get_session_factory"]
