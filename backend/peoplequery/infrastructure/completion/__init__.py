"""Completion service access (query synthesis and remote embeddings)."""

from functools import lru_cache

from ..config.settings import get_settings
from .client import CompletionClient


@lru_cache()
def get_completion_client() -> CompletionClient:
    """Get the singleton completion client built from settings."""
    settings = get_settings()
    return CompletionClient(
        base_url=settings.COMPLETION_API_URL,
        api_key=settings.COMPLETION_API_KEY,
        model=settings.COMPLETION_MODEL,
        embedding_model=settings.EMBEDDING_MODEL,
        dimension=settings.EMBEDDING_DIMENSION,
        timeout=settings.COMPLETION_TIMEOUT_SECONDS,
        max_retries=settings.COMPLETION_MAX_RETRIES,
    )


__all__ = ["CompletionClient", "get_completion_client"]
