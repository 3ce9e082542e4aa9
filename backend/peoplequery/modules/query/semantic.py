"""Similarity search over stored document chunks."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.indexing import LinearSearchIndex
from ...infrastructure.logging import get_logger
from ..chunk.services import ChunkService
from ..ingestion.embedder import Embedder
from .schemas import ScoredPassage

logger = get_logger(__name__)

DEFAULT_TOP_K = 5


class SemanticRetriever:
    """Embeds a question and returns the most similar chunks.

    The search runs over every stored chunk vector with an exact linear
    index built for the request. Chunks stored with a different vector
    dimension (written under an older embedding configuration) are
    skipped.
    """

    def __init__(self, embedder: Embedder, chunk_service: Optional[ChunkService] = None):
        self.embedder = embedder
        self.chunk_service = chunk_service or ChunkService()

    async def retrieve(self, question: str, k: int, db: AsyncSession) -> List[ScoredPassage]:
        """Return at most ``k`` passages by descending score, ties by chunk index.

        Raises:
            EmbeddingUnavailableError: If the question cannot be embedded
        """
        query_vector = await self.embedder.embed_query(question)

        vectors = await self.chunk_service.load_chunk_vectors(db)
        usable = [vector for vector in vectors if len(vector.embedding) == self.embedder.dimension]
        if len(usable) != len(vectors):
            logger.warning(
                "Skipping chunks with a different embedding dimension",
                extra={"skipped": len(vectors) - len(usable), "dimension": self.embedder.dimension},
            )

        index = LinearSearchIndex(self.embedder.dimension)
        await index.add_vectors(usable)
        results = await index.search(query_vector, k)

        return [
            ScoredPassage(
                chunk_id=result.chunk_id,
                document_id=result.document_id,
                chunk_index=result.chunk_index,
                file_name=result.metadata.get("file_name"),
                content=result.content,
                score=result.similarity_score,
                is_placeholder=bool(result.metadata.get("is_placeholder", False)),
            )
            for result in results
        ]
