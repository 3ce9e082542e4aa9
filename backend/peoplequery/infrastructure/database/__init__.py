"""Database engine, session and declarative base."""

from .session import Base, async_session, create_tables, engine, load_models, local_session

__all__ = ["Base", "async_session", "create_tables", "engine", "load_models", "local_session"]
