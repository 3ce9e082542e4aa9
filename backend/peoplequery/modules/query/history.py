"""Append-only log of answered questions."""

from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from .crud import query_history_crud
from .models import QueryHistory
from .schemas import QueryLogRead

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class QueryLogger:
    """Records one entry per answered question and reads the log back."""

    async def record(
        self,
        db: AsyncSession,
        question: str,
        query_type: str,
        response_time_ms: int,
        cache_hit: bool,
        session_id: Optional[str] = None,
        degraded: bool = False,
    ) -> None:
        """Append an entry to the query log.

        Args:
            db: Database session
            question: The question as asked
            query_type: Classification, or ``cache_hit`` for cached answers
            response_time_ms: End-to-end latency of the request
            cache_hit: Whether the answer came from the cache
            session_id: Client session, when the client sent one
            degraded: Whether a fallback path produced the answer
        """
        db.add(
            QueryHistory(
                question=question,
                query_type=query_type,
                response_time_ms=response_time_ms,
                cache_hit=cache_hit,
                session_id=session_id,
                degraded=degraded,
            )
        )
        await db.commit()

        logger.info(
            "Query answered",
            extra={"query_type": query_type, "response_time_ms": response_time_ms, "cache_hit": cache_hit},
        )

    async def history(
        self,
        db: AsyncSession,
        limit: int = DEFAULT_HISTORY_LIMIT,
        session_id: Optional[str] = None,
    ) -> List[QueryLogRead]:
        """Get log entries, most recent first, optionally for one session."""
        filters: Dict[str, Any] = {}
        if session_id is not None:
            filters["session_id"] = session_id

        result = await query_history_crud.get_multi(
            db=db,
            limit=limit,
            sort_columns=["created_at", "id"],
            sort_orders=["desc", "desc"],
            **filters,
        )
        return [QueryLogRead.model_validate(entry) for entry in result.get("data", [])]
