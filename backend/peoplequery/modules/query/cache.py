"""Exact-match answer cache with time-to-live expiry."""

import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import as_utc, utcnow
from ...infrastructure.logging import get_logger
from .models import QueryCacheEntry
from .schemas import QueryResponse

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 3600


def normalize_question(question: str) -> str:
    return question.strip().lower()


def cache_key(question: str) -> str:
    """Key for a question: SHA-256 of its trimmed, lower-cased text.

    Paraphrases get different keys; only case and surrounding whitespace
    are normalized away.
    """
    return hashlib.sha256(normalize_question(question).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    cache_key: str
    response: QueryResponse
    expires_at: datetime


class QueryCache:
    """Answer cache stored in the ``query_cache`` table.

    ``put`` is an upsert that replaces both the response and the expiry of
    an existing key. ``get`` never returns an entry whose expiry has passed.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], datetime] = utcnow):
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    async def get(self, key: str, db: AsyncSession) -> Optional[QueryResponse]:
        """Return the live cached response for ``key``, or None."""
        stmt = select(QueryCacheEntry.response, QueryCacheEntry.expires_at).where(QueryCacheEntry.cache_key == key)
        row = (await db.execute(stmt)).first()
        if row is None:
            return None

        if as_utc(row.expires_at) <= self.clock():
            return None

        return QueryResponse.model_validate(row.response)

    async def put(
        self,
        key: str,
        question: str,
        response: QueryResponse,
        db: AsyncSession,
        ttl_seconds: Optional[int] = None,
    ) -> CacheEntry:
        """Store ``response`` under ``key``, replacing any previous entry and its TTL."""
        now = self.clock()
        expires_at = now + timedelta(seconds=self.ttl_seconds if ttl_seconds is None else ttl_seconds)
        values: Dict[str, Any] = {
            "cache_key": key,
            "question": question,
            "response": response.model_dump(mode="json"),
            "expires_at": expires_at,
            "created_at": now,
            "updated_at": now,
        }

        dialect = db.get_bind().dialect.name
        if dialect in ("postgresql", "sqlite"):
            insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
            stmt = insert(QueryCacheEntry).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[QueryCacheEntry.cache_key],
                set_={
                    "question": stmt.excluded.question,
                    "response": stmt.excluded.response,
                    "expires_at": stmt.excluded.expires_at,
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            await db.execute(stmt)
        else:
            await db.execute(delete(QueryCacheEntry).where(QueryCacheEntry.cache_key == key))
            db.add(QueryCacheEntry(cache_key=key, question=question, response=values["response"], expires_at=expires_at))
        await db.commit()

        return CacheEntry(cache_key=key, response=response, expires_at=expires_at)

    async def purge_expired(self, db: AsyncSession) -> int:
        """Delete every expired entry.

        Returns:
            Number of entries removed
        """
        result = await db.execute(delete(QueryCacheEntry).where(QueryCacheEntry.expires_at <= self.clock()))
        await db.commit()

        removed = result.rowcount or 0
        logger.info("Expired cache entries purged", extra={"removed": removed})
        return removed
