"""Abstract base classes for vector similarity search over document chunks."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class IndexType(str, Enum):
    """Supported index types."""

    LINEAR_SEARCH = "linear_search"


@dataclass(frozen=True)
class ChunkVector:
    """A stored chunk together with its embedding."""

    chunk_id: int
    document_id: int
    chunk_index: int
    content: str
    embedding: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SearchResult:
    """A chunk returned by a search, with its similarity in [0, 1]."""

    chunk_id: int
    document_id: int
    chunk_index: int
    content: str
    similarity_score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class VectorIndex(ABC):
    """Interface every similarity index implements.

    Results are ordered by descending score; equal scores are ordered by
    ``chunk_index`` (then ``document_id``) so repeated searches return the
    same sequence.
    """

    def __init__(self, dimension: int):
        """Initialize the vector index.

        Args:
            dimension: The dimension of the vectors to be indexed
        """
        self.dimension = dimension
        self.vectors: List[ChunkVector] = []

    @property
    @abstractmethod
    def index_type(self) -> IndexType:
        pass

    @abstractmethod
    async def add_vectors(self, vectors: List[ChunkVector]) -> None:
        """Add vectors to the index.

        Raises:
            ValueError: If any embedding has the wrong dimension
        """
        pass

    @abstractmethod
    async def search(self, query_embedding: List[float], k: int) -> List[SearchResult]:
        """Return at most ``k`` results most similar to ``query_embedding``."""
        pass

    def __len__(self) -> int:
        return len(self.vectors)

    def _validate_embedding(self, embedding: List[float]) -> None:
        if len(embedding) != self.dimension:
            raise ValueError(f"Embedding dimension {len(embedding)} does not match index dimension {self.dimension}")
