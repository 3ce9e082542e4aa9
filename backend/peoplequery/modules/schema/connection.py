"""Connections to the target databases whose schema is discovered and queried."""

import os
from typing import Any, Dict

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ...infrastructure.logging import get_logger
from ..common.exceptions import ConnectionFailedError, ValidationError
from .schemas import DatabaseType

logger = get_logger(__name__)

ASYNC_DRIVERS = {
    DatabaseType.SQLITE: "sqlite+aiosqlite",
    DatabaseType.POSTGRESQL: "postgresql+asyncpg",
}

_BACKEND_ALIASES = {"postgres": "postgresql"}

_target_engines: Dict[str, AsyncEngine] = {}


def normalize_connection_url(connection_string: str, database_type: DatabaseType) -> URL:
    """Parse a user-supplied connection string into an async SQLAlchemy URL.

    A bare path is accepted for SQLite. Synchronous drivers
    (``postgresql://``, ``postgresql+psycopg2://``, ``sqlite://``) are
    switched to asyncpg/aiosqlite.

    Raises:
        ValidationError: If the string is not a URL of the declared database type
    """
    raw = connection_string.strip()
    if database_type == DatabaseType.SQLITE and "://" not in raw:
        raw = f"sqlite:///{raw}"

    try:
        url = make_url(raw)
    except ArgumentError as e:
        raise ValidationError("Invalid connection string") from e

    backend = url.drivername.split("+", 1)[0]
    backend = _BACKEND_ALIASES.get(backend, backend)
    if backend != database_type.value:
        raise ValidationError(f"Connection string is not a {database_type.value} URL")

    return url.set(drivername=ASYNC_DRIVERS[database_type])


def mask_url(url: URL) -> str:
    """Render a URL with its password hidden, safe for logs and job metadata."""
    return url.render_as_string(hide_password=True)


def ensure_reachable_file(url: URL) -> None:
    """Reject SQLite paths that do not exist instead of silently creating an empty database.

    Raises:
        ConnectionFailedError: If the database file is missing
    """
    if not url.drivername.startswith("sqlite"):
        return
    database = url.database or ""
    if database and database != ":memory:" and not database.startswith("file:") and not os.path.isfile(database):
        raise ConnectionFailedError(f"Database file not found: {database}")


def get_target_engine(url: URL) -> AsyncEngine:
    """Get (creating on first use) the engine for a target database."""
    key = url.render_as_string(hide_password=False)
    engine = _target_engines.get(key)
    if engine is None:
        ensure_reachable_file(url)
        options: Dict[str, Any] = {"pool_pre_ping": True}
        if url.drivername.startswith("sqlite"):
            options = {"connect_args": {"check_same_thread": False}}
        engine = create_async_engine(url, **options)
        _target_engines[key] = engine
        logger.debug("Created target engine", extra={"url": mask_url(url)})
    return engine


async def discard_target_engine(url: URL) -> None:
    """Dispose and forget the engine for ``url`` (after a failed connection)."""
    engine = _target_engines.pop(url.render_as_string(hide_password=False), None)
    if engine is not None:
        await engine.dispose()


async def dispose_target_engines() -> None:
    """Dispose every cached target engine (application shutdown, tests)."""
    engines = list(_target_engines.values())
    _target_engines.clear()
    for engine in engines:
        await engine.dispose()
