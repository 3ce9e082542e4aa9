"""Tests for similarity search over stored chunks."""

from typing import Dict, List

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from peoplequery.modules.chunk.schemas import ChunkCreateInternal
from peoplequery.modules.chunk.services import ChunkService
from peoplequery.modules.common.exceptions import EmbeddingUnavailableError
from peoplequery.modules.document.schemas import DocumentCreateInternal
from peoplequery.modules.document.services import DocumentService
from peoplequery.modules.ingestion.embedder import Embedder
from peoplequery.modules.query.semantic import SemanticRetriever


class StubBackend:
    """Returns a fixed vector per question."""

    dimension = 3

    def __init__(self, vectors: Dict[str, List[float]]):
        self.vectors = vectors

    async def embed(self, texts: List[str]) -> List[List[float]]:
        return [self.vectors[text] for text in texts]


async def store_document(db: AsyncSession, file_name: str, chunks: List[ChunkCreateInternal]) -> int:
    document = await DocumentService().create_document(
        DocumentCreateInternal(
            file_name=file_name,
            file_type="text/plain",
            file_size=100,
            content=" ".join(chunk.content for chunk in chunks),
            chunk_count=len(chunks),
        ),
        db,
    )
    await ChunkService().create_chunks(document.id, chunks, db)
    return document.id


@pytest.fixture
async def corpus(db_session: AsyncSession) -> Dict[str, int]:
    handbook_id = await store_document(
        db_session,
        "handbook.txt",
        [
            ChunkCreateInternal(chunk_index=0, content="Parental leave is sixteen weeks.", embedding=[1.0, 0.0, 0.0]),
            ChunkCreateInternal(chunk_index=1, content="Leave requests go to HR.", embedding=[0.8, 0.6, 0.0]),
            ChunkCreateInternal(
                chunk_index=2, content="Unembedded text.", embedding=[0.0, 0.0, 0.0], is_placeholder=True
            ),
        ],
    )
    travel_id = await store_document(
        db_session,
        "travel.txt",
        [ChunkCreateInternal(chunk_index=0, content="Travel is reimbursed.", embedding=[0.0, 0.0, 1.0])],
    )
    return {"handbook": handbook_id, "travel": travel_id}


@pytest.fixture
def retriever() -> SemanticRetriever:
    backend = StubBackend({"parental leave": [1.0, 0.0, 0.0], "travel": [0.0, 0.0, 1.0]})
    return SemanticRetriever(Embedder(backend))


@pytest.mark.asyncio
async def test_retrieve_orders_by_score(retriever: SemanticRetriever, corpus: Dict[str, int], db_session: AsyncSession):
    passages = await retriever.retrieve("parental leave", 2, db_session)

    assert [passage.content for passage in passages] == [
        "Parental leave is sixteen weeks.",
        "Leave requests go to HR.",
    ]
    assert passages[0].score == pytest.approx(1.0)
    assert passages[1].score == pytest.approx(0.8)
    assert passages[0].file_name == "handbook.txt"
    assert passages[0].document_id == corpus["handbook"]


@pytest.mark.asyncio
async def test_retrieve_returns_at_most_k(retriever: SemanticRetriever, corpus: Dict[str, int], db_session: AsyncSession):
    assert len(await retriever.retrieve("travel", 1, db_session)) == 1
    assert len(await retriever.retrieve("travel", 10, db_session)) == 4


@pytest.mark.asyncio
async def test_placeholder_chunks_score_zero(
    retriever: SemanticRetriever, corpus: Dict[str, int], db_session: AsyncSession
):
    passages = await retriever.retrieve("travel", 10, db_session)

    placeholder = next(passage for passage in passages if passage.is_placeholder)
    assert placeholder.score == 0.0
    assert passages[0].content == "Travel is reimbursed."


@pytest.mark.asyncio
async def test_chunks_with_other_dimension_are_skipped(
    retriever: SemanticRetriever, corpus: Dict[str, int], db_session: AsyncSession
):
    await store_document(
        db_session,
        "legacy.txt",
        [ChunkCreateInternal(chunk_index=0, content="Old vector.", embedding=[1.0, 0.0, 0.0, 0.0])],
    )

    passages = await retriever.retrieve("parental leave", 10, db_session)

    assert "Old vector." not in [passage.content for passage in passages]


@pytest.mark.asyncio
async def test_empty_corpus(retriever: SemanticRetriever, db_session: AsyncSession):
    assert await retriever.retrieve("parental leave", 5, db_session) == []


@pytest.mark.asyncio
async def test_question_embedding_failure(failing_embedding_backend, db_session: AsyncSession):
    retriever = SemanticRetriever(Embedder(failing_embedding_backend))

    with pytest.raises(EmbeddingUnavailableError):
        await retriever.retrieve("parental leave", 5, db_session)
