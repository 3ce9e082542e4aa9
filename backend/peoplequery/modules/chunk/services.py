"""Chunk storage and retrieval service."""

from typing import List

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import utcnow
from ...infrastructure.indexing import ChunkVector
from ..common.exceptions import DocumentNotFoundError
from ..document.crud import document_crud
from ..document.models import Document
from .models import DocumentChunk
from .schemas import ChunkCreateInternal, ChunkRead


class ChunkService:
    """Service for the chunk rows that back semantic retrieval.

    Chunks are written in bulk right after their document and read back
    either for display (ordered by ``chunk_index``) or as vectors for
    similarity search.
    """

    async def create_chunks(
        self,
        document_id: int,
        chunks: List[ChunkCreateInternal],
        db: AsyncSession,
        commit: bool = True,
    ) -> int:
        """Insert the chunks of one document in ``chunk_index`` order.

        Args:
            document_id: Owning document
            chunks: Chunks with contiguous indexes starting at 0
            db: Database session
            commit: Commit immediately, or leave it to the caller's transaction

        Returns:
            Number of rows inserted
        """
        if not chunks:
            return 0

        now = utcnow()
        rows = [
            {
                "document_id": document_id,
                "chunk_index": chunk.chunk_index,
                "content": chunk.content,
                "embedding": chunk.embedding,
                "is_placeholder": chunk.is_placeholder,
                "created_at": now,
                "updated_at": now,
            }
            for chunk in sorted(chunks, key=lambda c: c.chunk_index)
        ]

        await db.execute(insert(DocumentChunk), rows)
        if commit:
            await db.commit()
        return len(rows)

    async def get_chunks_by_document(self, document_id: int, db: AsyncSession) -> List[ChunkRead]:
        """Get all chunks of a document ordered by ``chunk_index``.

        Raises:
            DocumentNotFoundError: If no document has this id
        """
        if not await document_crud.exists(db=db, id=document_id):
            raise DocumentNotFoundError("Document not found")

        stmt = select(DocumentChunk).where(DocumentChunk.document_id == document_id).order_by(DocumentChunk.chunk_index)
        result = await db.execute(stmt)

        return [
            ChunkRead(
                id=chunk.id,
                document_id=chunk.document_id,
                chunk_index=chunk.chunk_index,
                content=chunk.content,
                embedding_dimension=len(chunk.embedding or []),
                is_placeholder=chunk.is_placeholder,
                created_at=chunk.created_at,
                updated_at=chunk.updated_at,
            )
            for chunk in result.scalars().all()
        ]

    async def load_chunk_vectors(self, db: AsyncSession) -> List[ChunkVector]:
        """Load every stored chunk as a vector ready for indexing."""
        stmt = (
            select(DocumentChunk, Document.file_name)
            .join(Document, Document.id == DocumentChunk.document_id)
            .order_by(DocumentChunk.document_id, DocumentChunk.chunk_index)
        )
        result = await db.execute(stmt)

        return [
            ChunkVector(
                chunk_id=chunk.id,
                document_id=chunk.document_id,
                chunk_index=chunk.chunk_index,
                content=chunk.content,
                embedding=list(chunk.embedding),
                metadata={"file_name": file_name, "is_placeholder": chunk.is_placeholder},
            )
            for chunk, file_name in result.all()
        ]
