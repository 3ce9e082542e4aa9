"""Batched text embedding with placeholder vectors for failed batches."""

from typing import List

from ...infrastructure.embedding import EmbeddingBackend
from ...infrastructure.logging import get_logger
from ..common.exceptions import EmbeddingUnavailableError, UpstreamUnavailableError
from .schemas import EmbeddedChunk

logger = get_logger(__name__)

EMBEDDING_BATCH_SIZE = 10


class Embedder:
    """Maps chunks and questions into the same vector space.

    Chunks are sent to the backend in batches of ``batch_size``. A batch the
    backend cannot embed (after the backend's own retries) gets zero vectors
    flagged ``is_placeholder`` so ingestion still completes; other batches
    are unaffected.
    """

    def __init__(self, backend: EmbeddingBackend, batch_size: int = EMBEDDING_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("Batch size must be at least 1")
        self.backend = backend
        self.batch_size = batch_size

    @property
    def dimension(self) -> int:
        return self.backend.dimension

    def placeholder_vector(self) -> List[float]:
        return [0.0] * self.dimension

    async def embed_chunks(self, chunks: List[str]) -> List[EmbeddedChunk]:
        """Embed chunks in order, one backend call per batch.

        Args:
            chunks: Chunk texts in ``chunk_index`` order

        Returns:
            One embedded chunk per input, indexes starting at 0
        """
        embedded: List[EmbeddedChunk] = []

        for batch_start in range(0, len(chunks), self.batch_size):
            batch = chunks[batch_start : batch_start + self.batch_size]

            try:
                vectors = await self._embed_batch(batch)
                placeholder = False
            except UpstreamUnavailableError as e:
                logger.warning(
                    "Embedding batch failed, storing placeholder vectors",
                    extra={"batch_start": batch_start, "batch_size": len(batch), "error": str(e)},
                )
                vectors = [self.placeholder_vector() for _ in batch]
                placeholder = True

            for offset, (text, vector) in enumerate(zip(batch, vectors)):
                embedded.append(
                    EmbeddedChunk(
                        chunk_index=batch_start + offset,
                        content=text,
                        embedding=vector,
                        is_placeholder=placeholder,
                    )
                )

        return embedded

    async def embed_query(self, question: str) -> List[float]:
        """Embed a single question.

        Raises:
            EmbeddingUnavailableError: If the backend cannot embed the question
        """
        try:
            vectors = await self._embed_batch([question])
        except UpstreamUnavailableError as e:
            raise EmbeddingUnavailableError(str(e)) from e
        return vectors[0]

    async def _embed_batch(self, texts: List[str]) -> List[List[float]]:
        vectors = await self.backend.embed(texts)
        if len(vectors) != len(texts):
            raise UpstreamUnavailableError(f"Expected {len(texts)} embeddings, got {len(vectors)}")
        if any(len(vector) != self.dimension for vector in vectors):
            raise UpstreamUnavailableError(f"Embeddings must have dimension {self.dimension}")
        return vectors
