"""Question answering façade: cache, classify, retrieve, fuse, cache, log."""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..common.exceptions import (
    ConnectionFailedError,
    EmbeddingUnavailableError,
    StructuredQueryError,
    SynthesisUnavailableError,
    UnsafeQueryRejectedError,
)
from ..schema.connection import get_target_engine
from ..schema.schemas import CurrentSchema
from ..schema.services import SchemaService
from .cache import QueryCache, cache_key
from .classifier import QueryClassifier
from .fusion import ResultFusion
from .history import QueryLogger
from .schemas import (
    CACHE_HIT_LABEL,
    DOCUMENT_SOURCE,
    STRUCTURED_SOURCE,
    QueryResponse,
    QueryResult,
    QueryType,
    ScoredPassage,
)
from .semantic import DEFAULT_TOP_K, SemanticRetriever
from .structured import StructuredRetriever, bounded_scan
from .synthesizer import QuerySynthesizer

logger = get_logger(__name__)

NO_SCHEMA = "no_schema"
NO_TABLES = "no_tables"
SYNTHESIS_UNAVAILABLE = "synthesis_unavailable"
UNSAFE_QUERY_REJECTED = "unsafe_query_rejected"
QUERY_FAILED = "query_failed"
DATABASE_UNAVAILABLE = "database_unavailable"
EMBEDDING_UNAVAILABLE = "embedding_unavailable"


@dataclass(frozen=True)
class StructuredOutcome:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    sql: Optional[str] = None
    reasons: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SemanticOutcome:
    passages: List[ScoredPassage] = field(default_factory=list)
    reasons: List[str] = field(default_factory=list)


class QueryEngine:
    """Answers questions over the employee database and the document corpus.

    Per request: look the question up in the cache and return a live hit
    immediately; otherwise classify it, run the structured path, the
    semantic path or both concurrently, assemble the answer, cache it and
    log it. Every request, hit or miss, writes exactly one log entry whose
    latency covers all network round-trips.

    Failures with a defined fallback never reach the caller:

    - synthesis unavailable, unsafe SQL, or a failing synthesized query
      fall back to a bounded scan of the primary entity table
    - no discovered schema yields no rows
    - a question that cannot be embedded yields no passages

    Such answers are marked ``degraded`` with the reasons listed, and are
    not cached so the next request tries the full path again.
    """

    def __init__(
        self,
        classifier: QueryClassifier,
        cache: QueryCache,
        synthesizer: QuerySynthesizer,
        structured_retriever: StructuredRetriever,
        semantic_retriever: SemanticRetriever,
        fusion: ResultFusion,
        query_logger: QueryLogger,
        schema_service: SchemaService,
        top_k: int = DEFAULT_TOP_K,
        fallback_row_limit: int = 10,
        primary_entity_table: str = "employees",
        timer: Callable[[], float] = time.perf_counter,
    ):
        self.classifier = classifier
        self.cache = cache
        self.synthesizer = synthesizer
        self.structured_retriever = structured_retriever
        self.semantic_retriever = semantic_retriever
        self.fusion = fusion
        self.query_logger = query_logger
        self.schema_service = schema_service
        self.top_k = top_k
        self.fallback_row_limit = fallback_row_limit
        self.primary_entity_table = primary_entity_table
        self.timer = timer

    async def answer(self, question: str, db: AsyncSession, session_id: Optional[str] = None) -> QueryResult:
        """Answer a question.

        Args:
            question: Natural-language question (already validated non-empty)
            db: Database session
            session_id: Optional client session recorded in the query log

        Returns:
            The answer envelope with latency, cache outcome and query type
        """
        started = self.timer()
        key = cache_key(question)

        cached = await self.cache.get(key, db)
        if cached is not None:
            elapsed = self._elapsed_ms(started)
            await self.query_logger.record(
                db, question, CACHE_HIT_LABEL, elapsed, cache_hit=True, session_id=session_id, degraded=cached.degraded
            )
            return QueryResult(result=cached, response_time_ms=elapsed, cache_hit=True, query_type=CACHE_HIT_LABEL)

        query_type = self.classifier.classify(question)
        logger.debug("Question classified", extra={"query_type": query_type.value})

        response = await self._route(query_type, question, db)

        if not response.degraded:
            await self.cache.put(key, question, response, db)

        elapsed = self._elapsed_ms(started)
        await self.query_logger.record(
            db,
            question,
            query_type.value,
            elapsed,
            cache_hit=False,
            session_id=session_id,
            degraded=response.degraded,
        )
        return QueryResult(result=response, response_time_ms=elapsed, cache_hit=False, query_type=query_type.value)

    async def _route(self, query_type: QueryType, question: str, db: AsyncSession) -> QueryResponse:
        if query_type == QueryType.UNSTRUCTURED:
            semantic = await self._semantic(question, db)
            return QueryResponse(
                kind=QueryType.UNSTRUCTURED,
                semantic_passages=semantic.passages,
                source_label=DOCUMENT_SOURCE,
                degraded=bool(semantic.reasons),
                fallback_reasons=semantic.reasons,
            )

        current = await self.schema_service.get_current(db)

        if query_type == QueryType.STRUCTURED:
            structured = await self._structured(question, current)
            return QueryResponse(
                kind=QueryType.STRUCTURED,
                structured_rows=structured.rows,
                source_label=STRUCTURED_SOURCE,
                structured_query=structured.sql,
                degraded=bool(structured.reasons),
                fallback_reasons=structured.reasons,
            )

        # The structured path only talks to the target database, so the session is used by one task.
        structured, semantic = await asyncio.gather(self._structured(question, current), self._semantic(question, db))
        reasons = structured.reasons + semantic.reasons
        return self.fusion.merge(
            structured.rows,
            semantic.passages,
            structured_query=structured.sql,
            degraded=bool(reasons),
            fallback_reasons=reasons,
        )

    async def _structured(self, question: str, current: Optional[CurrentSchema]) -> StructuredOutcome:
        if current is None:
            logger.warning("No schema discovered, structured path returns no rows")
            return StructuredOutcome(reasons=[NO_SCHEMA])

        try:
            engine = get_target_engine(make_url(current.connection_url))
        except ConnectionFailedError as e:
            logger.warning("Target database unavailable", extra={"error": str(e)})
            return StructuredOutcome(reasons=[DATABASE_UNAVAILABLE])

        reasons: List[str] = []
        try:
            query = await self.synthesizer.synthesize(question, current.description, current.database_type)
        except SynthesisUnavailableError as e:
            logger.warning("Query synthesis unavailable, falling back to bounded scan", extra={"error": str(e)})
            reasons.append(SYNTHESIS_UNAVAILABLE)
        else:
            try:
                rows = await self.structured_retriever.execute(query, engine)
                return StructuredOutcome(rows=rows, sql=query.sql)
            except UnsafeQueryRejectedError as e:
                logger.warning(
                    "Synthesized query rejected, falling back to bounded scan",
                    extra={"sql": query.sql, "reason": str(e)},
                )
                reasons.append(UNSAFE_QUERY_REJECTED)
            except StructuredQueryError:
                reasons.append(QUERY_FAILED)

        table = current.description.primary_entity(self.primary_entity_table)
        if table is None:
            return StructuredOutcome(reasons=reasons + [NO_TABLES])

        fallback = bounded_scan(table.name, self.fallback_row_limit)
        try:
            rows = await self.structured_retriever.execute(fallback, engine)
        except StructuredQueryError:
            return StructuredOutcome(sql=fallback.sql, reasons=reasons + [DATABASE_UNAVAILABLE])
        return StructuredOutcome(rows=rows, sql=fallback.sql, reasons=reasons)

    async def _semantic(self, question: str, db: AsyncSession) -> SemanticOutcome:
        try:
            passages = await self.semantic_retriever.retrieve(question, self.top_k, db)
        except EmbeddingUnavailableError as e:
            logger.warning("Question could not be embedded, semantic path returns no passages", extra={"error": str(e)})
            return SemanticOutcome(reasons=[EMBEDDING_UNAVAILABLE])
        return SemanticOutcome(passages=passages)

    def _elapsed_ms(self, started: float) -> int:
        return int(round((self.timer() - started) * 1000))
