"""SQLAlchemy models for discovered schemas."""

from typing import Any, Dict

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class DatabaseSchema(Base, TimestampMixin):
    """One discovery run's schema description.

    Rows are only ever appended; the newest one (by ``created_at``) is the
    schema queries are synthesized against. ``connection_url`` is kept so
    the structured retriever can reach the same database and is never
    returned by the API.
    """

    __tablename__ = "database_schemas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    job_id: Mapped[str] = mapped_column(String(36), index=True)
    database_type: Mapped[str] = mapped_column(String(20))
    connection_url: Mapped[str] = mapped_column(Text)
    schema_data: Mapped[Dict[str, Any]] = mapped_column(JSON)
