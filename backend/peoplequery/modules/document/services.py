"""Document management service."""

from typing import Any

from fastcrud import paginated_response
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..chunk.models import DocumentChunk
from ..common.exceptions import DocumentNotFoundError
from .crud import document_crud
from .models import Document
from .schemas import DocumentCreateInternal, DocumentDetail, DocumentRead

logger = get_logger(__name__)


class DocumentService:
    """Service for reading, creating and deleting ingested documents.

    Creation is only used by the ingestion pipeline, which persists a
    document and its chunks in a single transaction; the service therefore
    flushes instead of committing when asked to.
    """

    async def create_document(
        self,
        document_data: DocumentCreateInternal,
        db: AsyncSession,
        commit: bool = True,
    ) -> Document:
        """Persist a new document.

        Args:
            document_data: Document fields including the extracted text
            db: Database session
            commit: Commit immediately, or only flush so the caller can add chunks

        Returns:
            The stored document with its generated id
        """
        document = Document(**document_data.model_dump())

        db.add(document)
        if commit:
            await db.commit()
            await db.refresh(document)
        else:
            await db.flush()
        return document

    async def get_document(self, document_id: int, db: AsyncSession) -> DocumentDetail:
        """Get a document including its text.

        Raises:
            DocumentNotFoundError: If no document has this id
        """
        document = await document_crud.get(db=db, id=document_id)
        if not document:
            raise DocumentNotFoundError("Document not found")
        return DocumentDetail(**document)

    async def get_documents(
        self,
        db: AsyncSession,
        page: int = 1,
        items_per_page: int = 50,
    ) -> dict[str, Any]:
        """Get documents, newest first, with pagination.

        Args:
            db: Database session
            page: Page number (1-indexed)
            items_per_page: Number of documents per page

        Returns:
            Paginated response with documents
        """
        offset = (page - 1) * items_per_page

        stmt = await document_crud.select(sort_columns=["created_at", "id"], sort_orders=["desc", "desc"])
        stmt = stmt.offset(offset).limit(items_per_page)

        result = await db.execute(stmt)
        documents = [DocumentRead.model_validate(dict(row._mapping)).model_dump() for row in result.fetchall()]

        total_count = await document_crud.count(db=db)

        return paginated_response({"data": documents, "total_count": total_count}, page, items_per_page)

    async def count_documents(self, db: AsyncSession) -> int:
        return await document_crud.count(db=db)

    async def delete_document(self, document_id: int, db: AsyncSession) -> None:
        """Delete a document and all its chunks.

        Raises:
            DocumentNotFoundError: If no document has this id
        """
        if not await document_crud.exists(db=db, id=document_id):
            raise DocumentNotFoundError("Document not found")

        # SQLite does not enforce ON DELETE CASCADE unless foreign keys are enabled.
        await db.execute(delete(DocumentChunk).where(DocumentChunk.document_id == document_id))
        await db.execute(delete(Document).where(Document.id == document_id))
        await db.commit()

        logger.info("Document deleted", extra={"document_id": document_id})
