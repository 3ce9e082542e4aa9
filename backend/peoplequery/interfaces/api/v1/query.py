"""Question answering, query history and metrics endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from ....modules.common.utils.error_handler import handle_exception
from ....modules.query.engine import QueryEngine
from ....modules.query.history import DEFAULT_HISTORY_LIMIT, QueryLogger
from ....modules.query.metrics import QueryMetricsService
from ....modules.query.schemas import HistoryResponse, QueryMetrics, QueryRequest, QueryResult
from ..dependencies import DbSession, get_metrics_service, get_query_engine, get_query_logger

router = APIRouter(prefix="/query", tags=["Query"])


@router.post(
    "/",
    summary="Ask a Question",
    description="""
    Answers a natural-language question about employees.

    Questions about counts, salaries, departments and similar facts are
    answered from the connected database with a synthesized read-only SQL
    query; questions about policies and documents are answered with the
    most relevant document passages; questions mixing both get both.

    Answers are cached per normalized question. When a dependency is
    unavailable the answer is produced by a fallback and flagged
    `degraded` with the reasons listed.

    - **question**: The question (required, non-empty)
    - **session_id**: Optional client session recorded in the query history
    """,
    responses={
        200: {"description": "The answer with latency and cache outcome"},
        400: {"description": "Empty question"},
    },
)
async def ask_question(
    request: QueryRequest,
    db: DbSession,
    query_engine: QueryEngine = Depends(get_query_engine),
) -> QueryResult:
    """Answer a question."""
    try:
        return await query_engine.answer(request.question, db, session_id=request.session_id)
    except Exception as e:
        raise handle_exception(e)


@router.get(
    "/history",
    summary="Query History",
    description="""
    Returns answered questions, most recent first.

    - **limit**: Maximum number of entries (default: 50)
    - **session_id**: Only entries of this client session
    """,
    responses={200: {"description": "Query log entries"}},
)
async def get_query_history(
    db: DbSession,
    limit: Annotated[int, Query(ge=1, le=500, description="Maximum number of entries")] = DEFAULT_HISTORY_LIMIT,
    session_id: Annotated[Optional[str], Query(description="Filter by session id")] = None,
    query_logger: QueryLogger = Depends(get_query_logger),
) -> HistoryResponse:
    """Get the query log."""
    try:
        history = await query_logger.history(db, limit=limit, session_id=session_id or None)
        return HistoryResponse(history=history, count=len(history))
    except Exception as e:
        raise handle_exception(e)


@router.get(
    "/metrics",
    summary="Query Metrics",
    description="""
    Aggregates over the query log and the stores: total questions, average
    latency, cache hit rate (percent), sessions active in the last hour,
    tables in the current schema, documents ingested and the latest
    questions.
    """,
    responses={200: {"description": "Current metrics"}},
)
async def get_query_metrics(
    db: DbSession,
    metrics_service: QueryMetricsService = Depends(get_metrics_service),
) -> QueryMetrics:
    """Get query metrics."""
    try:
        return await metrics_service.collect(db)
    except Exception as e:
        raise handle_exception(e)
