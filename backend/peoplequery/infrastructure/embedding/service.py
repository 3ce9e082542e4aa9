"""Embedding backends: the remote completion gateway or a local sentence-transformers model."""

import asyncio
from functools import lru_cache
from typing import TYPE_CHECKING, List, Optional, Protocol, cast

from ...modules.common.exceptions import UpstreamUnavailableError
from ..completion import get_completion_client
from ..config.settings import EmbeddingProvider, get_settings
from ..logging import get_logger

if TYPE_CHECKING:
    from sentence_transformers import SentenceTransformer

logger = get_logger(__name__)


class EmbeddingBackend(Protocol):
    """Anything that maps a batch of texts to fixed-length vectors."""

    @property
    def dimension(self) -> int: ...

    async def embed(self, texts: List[str]) -> List[List[float]]: ...


class LocalEmbeddingService:
    """Generates embeddings in-process with sentence-transformers.

    Uses all-mpnet-base-v2 by default, which produces 768-dimensional
    normalized vectors. The model is loaded lazily on first use and the
    blocking encode call runs in a worker thread so the event loop keeps
    serving other requests.
    """

    def __init__(self, model_name: str = "all-mpnet-base-v2", dimension: int = 768):
        """Initialize the local backend.

        Args:
            model_name: HuggingFace model name for sentence transformers
            dimension: Vector length the rest of the system expects
        """
        self.model_name = model_name
        self._dimension = dimension
        self._model: Optional["SentenceTransformer"] = None
        self._model_lock = asyncio.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    async def _get_model(self) -> "SentenceTransformer":
        """Get model instance, loading it if necessary."""
        if self._model is None:
            async with self._model_lock:
                if self._model is None:
                    from sentence_transformers import SentenceTransformer

                    logger.info("Loading sentence-transformers model", extra={"model": self.model_name})
                    self._model = cast("SentenceTransformer", await asyncio.to_thread(SentenceTransformer, self.model_name))
        if self._model is None:
            raise RuntimeError("Model failed to load")
        return self._model

    async def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of texts.

        Raises:
            UpstreamUnavailableError: If the model cannot be loaded or produces
                vectors of an unexpected dimension.
        """
        if not texts:
            return []

        try:
            model = await self._get_model()
            embeddings = await asyncio.to_thread(
                model.encode,
                texts,
                convert_to_tensor=False,
                normalize_embeddings=True,
                batch_size=32,
            )
        except (OSError, RuntimeError, ValueError) as e:
            raise UpstreamUnavailableError(f"Local embedding model unavailable: {e}") from e

        vectors = cast(List[List[float]], embeddings.tolist())
        if any(len(vector) != self._dimension for vector in vectors):
            raise UpstreamUnavailableError(
                f"Model {self.model_name} does not produce {self._dimension}-dimensional vectors"
            )
        return vectors


@lru_cache()
def get_local_embedding_service() -> LocalEmbeddingService:
    """Get singleton local embedding service instance."""
    settings = get_settings()
    return LocalEmbeddingService(model_name=settings.LOCAL_EMBEDDING_MODEL, dimension=settings.EMBEDDING_DIMENSION)


def get_embedding_backend() -> EmbeddingBackend:
    """Return the embedding backend selected by ``EMBEDDING_PROVIDER``."""
    if get_settings().EMBEDDING_PROVIDER == EmbeddingProvider.LOCAL:
        return get_local_embedding_service()
    return get_completion_client()
