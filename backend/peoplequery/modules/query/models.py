"""SQLAlchemy models for the query cache and the query log."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class QueryCacheEntry(Base, TimestampMixin):
    """A cached answer keyed by the normalized question.

    At most one row exists per key; rows past ``expires_at`` are ignored on
    read and removed by ``QueryCache.purge_expired``.
    """

    __tablename__ = "query_cache"

    cache_key: Mapped[str] = mapped_column(String(64), primary_key=True)
    question: Mapped[str] = mapped_column(Text)
    response: Mapped[Dict[str, Any]] = mapped_column(JSON)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class QueryHistory(Base, TimestampMixin):
    """One answered question. Rows are append-only."""

    __tablename__ = "query_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    question: Mapped[str] = mapped_column(Text)
    query_type: Mapped[str] = mapped_column(String(20), index=True)
    response_time_ms: Mapped[int] = mapped_column(Integer)
    cache_hit: Mapped[bool] = mapped_column(Boolean, default=False)
    session_id: Mapped[Optional[str]] = mapped_column(String(255), default=None, index=True)
    degraded: Mapped[bool] = mapped_column(Boolean, default=False)
