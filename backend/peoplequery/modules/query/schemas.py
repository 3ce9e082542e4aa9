"""Pydantic schemas for questions, answers and the query log."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.schemas import SuccessResponse

CACHE_HIT_LABEL = "cache_hit"

STRUCTURED_SOURCE = "database"
DOCUMENT_SOURCE = "documents"
HYBRID_SOURCE = "database+documents"


class QueryType(str, Enum):
    STRUCTURED = "structured"
    UNSTRUCTURED = "unstructured"
    HYBRID = "hybrid"


class ScoredPassage(BaseModel):
    """A document chunk returned for a question, with its relevance in [0, 1]."""

    model_config = ConfigDict(frozen=True)

    chunk_id: int
    document_id: int
    chunk_index: int
    file_name: Optional[str] = None
    content: str
    score: Annotated[float, Field(ge=0.0, le=1.0)]
    is_placeholder: bool = False


class QueryResponse(BaseModel):
    """The answer envelope; exactly what is cached for a question.

    ``degraded`` is set when a fallback path produced the answer and
    ``fallback_reasons`` names each fallback taken.
    """

    model_config = ConfigDict(frozen=True)

    kind: QueryType
    structured_rows: Optional[List[Dict[str, Any]]] = None
    semantic_passages: Optional[List[ScoredPassage]] = None
    source_label: str
    structured_query: Optional[str] = None
    degraded: bool = False
    fallback_reasons: List[str] = Field(default_factory=list)


class QueryRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"question": "How many employees are in Engineering?", "session_id": "abc123"}}
    )

    question: str = Field(max_length=2000)
    session_id: Optional[str] = Field(default=None, max_length=255)

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Question is required")
        return v


class QueryResult(SuccessResponse):
    result: QueryResponse
    response_time_ms: int
    cache_hit: bool
    query_type: str


class QueryLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    query_type: str
    response_time_ms: int
    cache_hit: bool
    session_id: Optional[str] = None
    degraded: bool = False
    created_at: datetime


class HistoryResponse(SuccessResponse):
    history: List[QueryLogRead]
    count: int


class RecentQuery(BaseModel):
    question: str
    query_type: str
    response_time_ms: int
    cache_hit: bool
    created_at: datetime


class QueryMetrics(SuccessResponse):
    """Aggregates computed from the query log and the stores."""

    total_queries: int
    avg_response_time_ms: float
    cache_hit_rate: float = Field(description="Percentage of questions answered from the cache")
    active_sessions: int = Field(description="Distinct session ids seen in the last hour")
    tables_indexed: int
    documents_indexed: int
    recent_queries: List[RecentQuery]
