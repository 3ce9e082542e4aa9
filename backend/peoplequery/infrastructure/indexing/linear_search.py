"""Linear search vector index implementation."""

from typing import List

import numpy as np

from .base import ChunkVector, IndexType, SearchResult, VectorIndex


class LinearSearchIndex(VectorIndex):
    """Exact brute-force cosine similarity search.

    Compares the query against every stored vector with a single matrix
    product, which is plenty for the few thousand chunks an HR document
    corpus produces.

    Characteristics:
    - Time Complexity (Search): O(n * d) where n = vectors, d = dimension
    - Accuracy: 100% (exact results)
    - Build Time: none

    Zero vectors (placeholder embeddings) always score 0.
    """

    def __init__(self, dimension: int):
        super().__init__(dimension)
        self._matrix = np.empty((0, dimension), dtype=np.float32)

    @property
    def index_type(self) -> IndexType:
        return IndexType.LINEAR_SEARCH

    async def add_vectors(self, vectors: List[ChunkVector]) -> None:
        """Add multiple vectors to the index.

        Args:
            vectors: List of vectors to add to the index
        """
        if not vectors:
            return

        for vector in vectors:
            self._validate_embedding(vector.embedding)

        rows = np.asarray([vector.embedding for vector in vectors], dtype=np.float32)
        self._matrix = np.vstack([self._matrix, rows])
        self.vectors.extend(vectors)

    async def search(self, query_embedding: List[float], k: int) -> List[SearchResult]:
        """Search for the k most similar vectors.

        Args:
            query_embedding: The query vector
            k: Number of nearest neighbors to return

        Returns:
            Search results sorted by similarity (descending), ties by chunk index
        """
        self._validate_embedding(query_embedding)

        if not self.vectors or k <= 0:
            return []

        scores = self._cosine_similarities(np.asarray(query_embedding, dtype=np.float32))

        ranked = sorted(
            range(len(self.vectors)),
            key=lambda i: (-scores[i], self.vectors[i].chunk_index, self.vectors[i].document_id),
        )

        results = []
        for i in ranked[:k]:
            vector = self.vectors[i]
            results.append(
                SearchResult(
                    chunk_id=vector.chunk_id,
                    document_id=vector.document_id,
                    chunk_index=vector.chunk_index,
                    content=vector.content,
                    similarity_score=float(scores[i]),
                    metadata=vector.metadata,
                )
            )
        return results

    def _cosine_similarities(self, query: np.ndarray) -> np.ndarray:
        """Cosine similarity of ``query`` against every row, clipped to [0, 1].

        Formula: cos(θ) = (A · B) / (||A|| ||B||)
        """
        query_norm = float(np.linalg.norm(query))
        row_norms = np.linalg.norm(self._matrix, axis=1)

        if query_norm == 0.0:
            return np.zeros(len(self.vectors), dtype=np.float64)

        dots = self._matrix @ query
        denominators = row_norms * query_norm
        with np.errstate(divide="ignore", invalid="ignore"):
            similarities = np.where(denominators > 0.0, dots / denominators, 0.0)

        return np.clip(similarities.astype(np.float64), 0.0, 1.0)
