"""Embedding infrastructure for text-to-vector conversion."""

from .service import EmbeddingBackend, LocalEmbeddingService, get_embedding_backend, get_local_embedding_service

__all__ = ["EmbeddingBackend", "LocalEmbeddingService", "get_embedding_backend", "get_local_embedding_service"]
