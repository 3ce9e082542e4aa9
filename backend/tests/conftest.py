"""Test configuration and fixtures for the people query service."""

import os

# Settings are read once at import time, so the environment is prepared first.
os.environ["ENVIRONMENT"] = "local"
os.environ["DATABASE_BACKEND"] = "sqlite"
os.environ["SQLITE_URI"] = ":memory:"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["COMPLETION_API_KEY"] = ""
os.environ["EMBEDDING_PROVIDER"] = "remote"
os.environ["EMBEDDING_DIMENSION"] = "8"
os.environ["LOG_CONSOLE_ENABLED"] = "false"

import hashlib  # noqa: E402
import re  # noqa: E402
import sqlite3  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import List  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

# mypy: disable-error-code="import-untyped"
from testcontainers.core.docker_client import DockerClient  # noqa: E402
from testcontainers.postgres import PostgresContainer  # noqa: E402

from peoplequery.infrastructure.completion import get_completion_client  # noqa: E402
from peoplequery.infrastructure.database.session import Base, async_session, load_models  # noqa: E402
from peoplequery.infrastructure.embedding import get_embedding_backend  # noqa: E402
from peoplequery.infrastructure.logging import configure_testing_logging, mark_logging_configured  # noqa: E402
from peoplequery.interfaces.main import app  # noqa: E402
from peoplequery.modules.common.exceptions import UpstreamUnavailableError  # noqa: E402
from peoplequery.modules.schema.connection import dispose_target_engines  # noqa: E402

configure_testing_logging()
mark_logging_configured()

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
EMBEDDING_DIMENSION = 8

_WORD = re.compile(r"[a-z0-9]+")


def is_docker_running() -> bool:
    """Check if Docker daemon is running."""
    try:
        DockerClient()
        return True
    except Exception:
        return False


class FakeEmbeddingBackend:
    """Deterministic bag-of-words embeddings: each word adds 1 to a hashed bucket.

    Texts sharing words get similar vectors, so ranking behaves predictably
    without a model or network.
    """

    def __init__(self, dimension: int = EMBEDDING_DIMENSION, fail: bool = False):
        self.dimension = dimension
        self.fail = fail
        self.calls: List[List[str]] = []

    async def embed(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        if self.fail:
            raise UpstreamUnavailableError("Embedding service unavailable")
        return [self.vector(text) for text in texts]

    def vector(self, text: str) -> List[float]:
        vector = [0.0] * self.dimension
        for word in _WORD.findall(text.lower()):
            bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % self.dimension
            vector[bucket] += 1.0
        return vector


class FakeCompletionClient:
    """Stands in for the completion service; ``complete`` is an AsyncMock."""

    def __init__(self, sql: str = "SELECT COUNT(*) AS employee_count FROM employees"):
        self.complete = AsyncMock(return_value=sql)


@pytest.fixture
def embedding_backend() -> FakeEmbeddingBackend:
    return FakeEmbeddingBackend()


@pytest.fixture
def failing_embedding_backend() -> FakeEmbeddingBackend:
    return FakeEmbeddingBackend(fail=True)


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """In-memory SQLite store with every table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    load_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_db_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(test_db_engine, embedding_backend, completion_client):
    """HTTP client against the app with the store and the completion service replaced."""
    app.dependency_overrides = {}

    session_factory = async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        """Each request gets its own database session."""
        async with session_factory() as session:
            yield session

    app.dependency_overrides[async_session] = override_get_db
    app.dependency_overrides[get_embedding_backend] = lambda: embedding_backend
    app.dependency_overrides[get_completion_client] = lambda: completion_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
    await dispose_target_engines()


@pytest.fixture
def employee_db(tmp_path: Path) -> Path:
    """A small HR database: departments, employees (declared FK) and reviews (no FK)."""
    path = tmp_path / "hr.db"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE departments (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            budget REAL
        );
        CREATE TABLE employees (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            department_id INTEGER REFERENCES departments(id),
            salary REAL,
            hire_date TEXT,
            title TEXT,
            manager_id INTEGER
        );
        CREATE TABLE reviews (
            id INTEGER PRIMARY KEY,
            employee_id INTEGER,
            rating INTEGER,
            review_date TEXT
        );
        INSERT INTO departments (id, name, budget) VALUES
            (1, 'Engineering', 1500000.0),
            (2, 'People', 400000.0);
        INSERT INTO employees (id, name, department_id, salary, hire_date, title, manager_id) VALUES
            (1, 'Ada Park', 1, 185000.0, '2019-03-01', 'Staff Engineer', NULL),
            (2, 'Ben Ortiz', 1, 142000.0, '2021-07-15', 'Engineer', 1),
            (3, 'Chloe Wu', 1, 151000.0, '2020-01-06', 'Engineer', 1),
            (4, 'Dev Rao', 2, 98000.0, '2022-02-14', 'Recruiter', NULL);
        INSERT INTO reviews (id, employee_id, rating, review_date) VALUES
            (1, 2, 4, '2023-12-01'),
            (2, 3, 5, '2023-12-01');
        """
    )
    conn.commit()
    conn.close()
    return path


@pytest_asyncio.fixture
async def target_engines():
    """Dispose target database engines created by a test."""
    yield
    await dispose_target_engines()


@pytest.fixture(scope="session")
def pg_container():
    """Create a PostgreSQL container for testing."""
    if not is_docker_running():
        pytest.skip("Docker is required, but not running")

    with PostgresContainer() as pg:
        yield pg
