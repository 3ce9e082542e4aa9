"""Tests for the answer cache."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from peoplequery.modules.query.cache import QueryCache, cache_key
from peoplequery.modules.query.models import QueryCacheEntry
from peoplequery.modules.query.schemas import DOCUMENT_SOURCE, STRUCTURED_SOURCE, QueryResponse, QueryType


class MutableClock:
    def __init__(self):
        self.now = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def cache(clock: MutableClock) -> QueryCache:
    return QueryCache(ttl_seconds=3600, clock=clock)


def structured_response(count: int) -> QueryResponse:
    return QueryResponse(
        kind=QueryType.STRUCTURED,
        structured_rows=[{"employee_count": count}],
        source_label=STRUCTURED_SOURCE,
        structured_query="SELECT COUNT(*) AS employee_count FROM employees",
    )


def test_cache_key_ignores_case_and_surrounding_whitespace():
    assert cache_key("  How many employees?  ") == cache_key("how many EMPLOYEES?")
    assert len(cache_key("anything")) == 64


def test_cache_key_distinguishes_paraphrases():
    assert cache_key("How many employees?") != cache_key("How many employees are there?")


@pytest.mark.asyncio
async def test_put_then_get(cache: QueryCache, db_session: AsyncSession):
    key = cache_key("How many employees?")
    await cache.put(key, "How many employees?", structured_response(4), db_session)

    cached = await cache.get(key, db_session)

    assert cached == structured_response(4)


@pytest.mark.asyncio
async def test_get_missing_key(cache: QueryCache, db_session: AsyncSession):
    assert await cache.get(cache_key("never asked"), db_session) is None


@pytest.mark.asyncio
async def test_entry_expires_after_ttl(cache: QueryCache, clock: MutableClock, db_session: AsyncSession):
    key = cache_key("How many employees?")
    await cache.put(key, "How many employees?", structured_response(4), db_session)

    clock.advance(3599)
    assert await cache.get(key, db_session) is not None

    clock.advance(1)
    assert await cache.get(key, db_session) is None


@pytest.mark.asyncio
async def test_put_replaces_response_and_expiry(cache: QueryCache, clock: MutableClock, db_session: AsyncSession):
    """A second put for the same key overwrites the entry and restarts its TTL."""
    key = cache_key("How many employees?")
    await cache.put(key, "How many employees?", structured_response(4), db_session)

    clock.advance(3000)
    await cache.put(key, "how many employees?", structured_response(5), db_session)

    clock.advance(3000)
    cached = await cache.get(key, db_session)
    assert cached is not None
    assert cached.structured_rows == [{"employee_count": 5}]

    count = (await db_session.execute(select(func.count()).select_from(QueryCacheEntry))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
async def test_per_entry_ttl(cache: QueryCache, clock: MutableClock, db_session: AsyncSession):
    key = cache_key("What does the leave policy say?")
    response = QueryResponse(kind=QueryType.UNSTRUCTURED, semantic_passages=[], source_label=DOCUMENT_SOURCE)
    await cache.put(key, "What does the leave policy say?", response, db_session, ttl_seconds=60)

    clock.advance(61)

    assert await cache.get(key, db_session) is None


@pytest.mark.asyncio
async def test_purge_expired(cache: QueryCache, clock: MutableClock, db_session: AsyncSession):
    await cache.put(cache_key("old"), "old", structured_response(1), db_session, ttl_seconds=10)
    await cache.put(cache_key("fresh"), "fresh", structured_response(2), db_session, ttl_seconds=7200)

    clock.advance(3600)
    removed = await cache.purge_expired(db_session)

    assert removed == 1
    keys = (await db_session.execute(select(QueryCacheEntry.cache_key))).scalars().all()
    assert keys == [cache_key("fresh")]
