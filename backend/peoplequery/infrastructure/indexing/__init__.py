"""Vector similarity search over document chunks."""

from .base import ChunkVector, IndexType, SearchResult, VectorIndex
from .linear_search import LinearSearchIndex

__all__ = [
    "VectorIndex",
    "IndexType",
    "ChunkVector",
    "SearchResult",
    "LinearSearchIndex",
]
