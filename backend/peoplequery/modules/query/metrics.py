"""Usage metrics computed from the query log and the stores."""

from datetime import timedelta
from typing import Callable, Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import utcnow
from ..document.services import DocumentService
from ..schema.services import SchemaService
from .history import QueryLogger
from .models import QueryHistory
from .schemas import QueryMetrics, RecentQuery

ACTIVE_SESSION_WINDOW = timedelta(hours=1)
RECENT_QUERY_COUNT = 10


class QueryMetricsService:
    """Aggregates the query log into dashboard figures."""

    def __init__(
        self,
        schema_service: SchemaService,
        document_service: Optional[DocumentService] = None,
        query_logger: Optional[QueryLogger] = None,
        clock: Callable = utcnow,
    ):
        self.schema_service = schema_service
        self.document_service = document_service or DocumentService()
        self.query_logger = query_logger or QueryLogger()
        self.clock = clock

    async def collect(self, db: AsyncSession, recent_limit: int = RECENT_QUERY_COUNT) -> QueryMetrics:
        totals = (
            await db.execute(
                select(
                    func.count(QueryHistory.id),
                    func.avg(QueryHistory.response_time_ms),
                    func.count(QueryHistory.id).filter(QueryHistory.cache_hit.is_(True)),
                )
            )
        ).one()
        total_queries, avg_response_time, cache_hits = int(totals[0] or 0), totals[1], int(totals[2] or 0)

        active_sessions = (
            await db.execute(
                select(func.count(distinct(QueryHistory.session_id))).where(
                    QueryHistory.session_id.is_not(None),
                    QueryHistory.created_at >= self.clock() - ACTIVE_SESSION_WINDOW,
                )
            )
        ).scalar_one()

        current = await self.schema_service.get_current(db)
        recent = await self.query_logger.history(db, limit=recent_limit)

        return QueryMetrics(
            total_queries=total_queries,
            avg_response_time_ms=round(float(avg_response_time or 0.0), 1),
            cache_hit_rate=round(cache_hits * 100.0 / total_queries, 1) if total_queries else 0.0,
            active_sessions=int(active_sessions or 0),
            tables_indexed=len(current.description.tables) if current else 0,
            documents_indexed=await self.document_service.count_documents(db),
            recent_queries=[
                RecentQuery(
                    question=entry.question,
                    query_type=entry.query_type,
                    response_time_ms=entry.response_time_ms,
                    cache_hit=entry.cache_hit,
                    created_at=entry.created_at,
                )
                for entry in recent
            ],
        )
