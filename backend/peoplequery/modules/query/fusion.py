"""Combining database rows and document passages into one answer."""

from typing import Any, Dict, Optional, Sequence

from .schemas import HYBRID_SOURCE, QueryResponse, QueryType, ScoredPassage


class ResultFusion:
    """Builds the ``hybrid`` answer envelope.

    Both result sets are carried unchanged and in order, each under its
    own field; nothing is re-ranked or deduplicated across them.
    """

    def merge(
        self,
        structured_rows: Sequence[Dict[str, Any]],
        semantic_passages: Sequence[ScoredPassage],
        structured_query: Optional[str] = None,
        degraded: bool = False,
        fallback_reasons: Sequence[str] = (),
    ) -> QueryResponse:
        return QueryResponse(
            kind=QueryType.HYBRID,
            structured_rows=list(structured_rows),
            semantic_passages=list(semantic_passages),
            source_label=HYBRID_SOURCE,
            structured_query=structured_query,
            degraded=degraded,
            fallback_reasons=list(fallback_reasons),
        )
