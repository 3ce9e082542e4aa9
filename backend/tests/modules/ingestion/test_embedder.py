"""Tests for batched chunk embedding with placeholders."""

from typing import List

import pytest

from peoplequery.modules.common.exceptions import EmbeddingUnavailableError, UpstreamUnavailableError
from peoplequery.modules.ingestion.embedder import Embedder


class FlakyBackend:
    """Fails every batch whose first text is listed in ``failing``."""

    dimension = 4

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.batches: List[List[str]] = []

    async def embed(self, texts: List[str]) -> List[List[float]]:
        self.batches.append(list(texts))
        if texts[0] in self.failing:
            raise UpstreamUnavailableError("batch rejected")
        return [[float(len(text)), 1.0, 0.0, 0.0] for text in texts]


@pytest.mark.asyncio
async def test_chunks_are_embedded_in_batches():
    backend = FlakyBackend()
    chunks = [f"chunk {i}" for i in range(25)]

    embedded = await Embedder(backend, batch_size=10).embed_chunks(chunks)

    assert [len(batch) for batch in backend.batches] == [10, 10, 5]
    assert [chunk.chunk_index for chunk in embedded] == list(range(25))
    assert [chunk.content for chunk in embedded] == chunks
    assert not any(chunk.is_placeholder for chunk in embedded)


@pytest.mark.asyncio
async def test_failed_batch_gets_placeholder_vectors():
    """Only the failing batch is replaced; the others keep their vectors."""
    backend = FlakyBackend(failing={"chunk 10"})
    chunks = [f"chunk {i}" for i in range(25)]

    embedded = await Embedder(backend, batch_size=10).embed_chunks(chunks)

    placeholders = [chunk.chunk_index for chunk in embedded if chunk.is_placeholder]
    assert placeholders == list(range(10, 20))
    assert all(chunk.embedding == [0.0, 0.0, 0.0, 0.0] for chunk in embedded if chunk.is_placeholder)
    assert embedded[0].embedding == [7.0, 1.0, 0.0, 0.0]


@pytest.mark.asyncio
async def test_wrong_dimension_counts_as_failure():
    class ShortVectors(FlakyBackend):
        async def embed(self, texts: List[str]) -> List[List[float]]:
            return [[1.0] for _ in texts]

    embedded = await Embedder(ShortVectors()).embed_chunks(["a", "b"])

    assert all(chunk.is_placeholder for chunk in embedded)


@pytest.mark.asyncio
async def test_embed_query():
    vector = await Embedder(FlakyBackend()).embed_query("leave")

    assert vector == [5.0, 1.0, 0.0, 0.0]


@pytest.mark.asyncio
async def test_embed_query_failure():
    with pytest.raises(EmbeddingUnavailableError):
        await Embedder(FlakyBackend(failing={"leave"})).embed_query("leave")


def test_batch_size_must_be_positive():
    with pytest.raises(ValueError):
        Embedder(FlakyBackend(), batch_size=0)
