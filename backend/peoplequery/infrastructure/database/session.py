import importlib
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass
from sqlalchemy.pool import StaticPool

from ..config.settings import DatabaseBackend, settings

MODEL_MODULES = (
    "peoplequery.modules.document.models",
    "peoplequery.modules.chunk.models",
    "peoplequery.modules.jobs.models",
    "peoplequery.modules.schema.models",
    "peoplequery.modules.query.models",
)


def _engine_options() -> Dict[str, Any]:
    """Engine keyword arguments appropriate for the configured backend."""
    if settings.DATABASE_BACKEND == DatabaseBackend.SQLITE:
        options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if settings.SQLITE_URI == ":memory:":
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_size": settings.POSTGRES_POOL_SIZE,
        "max_overflow": settings.POSTGRES_MAX_OVERFLOW,
    }


engine = create_async_engine(settings.DATABASE_URL, echo=False, future=True, **_engine_options())

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Base class for all database models.

    Combines SQLAlchemy's DeclarativeBase with MappedAsDataclass so every
    model gets a generated ``__init__``/``__repr__``/``__eq__`` from its
    ``Mapped`` annotations.

    Example:
        ```python
        class Department(Base):
            __tablename__ = "departments"

            id: Mapped[int] = mapped_column(Integer, primary_key=True, init=False)
            name: Mapped[str] = mapped_column(String(100))
        ```
    """

    pass


def load_models() -> None:
    """Import every model module so its tables are registered on ``Base.metadata``."""
    for module_name in MODEL_MODULES:
        importlib.import_module(module_name)


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database session management with proper lifecycle.

    Yields:
        AsyncSession: A configured async database session.

    Example:
        ```python
        @router.get("/documents/")
        async def list_documents(db: AsyncSession = Depends(async_session)):
            ...
        ```
    """
    async with local_session() as db:
        yield db


async def create_tables() -> None:
    """Create all tables in the database if they don't exist.

    Idempotent: existing tables are left unchanged.
    """
    load_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
