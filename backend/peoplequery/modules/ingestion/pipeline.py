"""Extract, chunk, embed and store one uploaded file."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..chunk.schemas import ChunkCreateInternal
from ..chunk.services import ChunkService
from ..document.schemas import DocumentCreateInternal
from ..document.services import DocumentService
from .chunker import Chunker
from .embedder import Embedder
from .extractor import Extractor, PlainTextExtractor
from .schemas import IngestedDocument, SourceFile

logger = get_logger(__name__)


class IngestionPipeline:
    """Turns an uploaded file into a stored document and its chunk vectors.

    All network work (embedding) happens before anything is written; the
    document row and its chunk rows are then committed together, so a
    document is never visible without its chunks.
    """

    def __init__(
        self,
        embedder: Embedder,
        chunker: Optional[Chunker] = None,
        extractor: Optional[Extractor] = None,
        document_service: Optional[DocumentService] = None,
        chunk_service: Optional[ChunkService] = None,
    ):
        self.embedder = embedder
        self.chunker = chunker or Chunker()
        self.extractor = extractor or PlainTextExtractor()
        self.document_service = document_service or DocumentService()
        self.chunk_service = chunk_service or ChunkService()

    async def ingest(self, source: SourceFile, db: AsyncSession) -> IngestedDocument:
        """Ingest one file.

        Args:
            source: The uploaded file
            db: Database session

        Returns:
            Summary of the stored document
        """
        text = self.extractor.extract(source)
        pieces = self.chunker.chunk(text, source.file_type)
        embedded = await self.embedder.embed_chunks(pieces)

        document = await self.document_service.create_document(
            DocumentCreateInternal(
                file_name=source.file_name,
                file_type=source.file_type,
                file_size=source.file_size,
                content=text,
                chunk_count=len(embedded),
            ),
            db,
            commit=False,
        )
        await self.chunk_service.create_chunks(
            document.id,
            [
                ChunkCreateInternal(
                    chunk_index=chunk.chunk_index,
                    content=chunk.content,
                    embedding=chunk.embedding,
                    is_placeholder=chunk.is_placeholder,
                )
                for chunk in embedded
            ],
            db,
            commit=False,
        )
        await db.commit()

        placeholder_chunks = sum(1 for chunk in embedded if chunk.is_placeholder)
        logger.info(
            "Document ingested",
            extra={
                "document_id": document.id,
                "file_name": source.file_name,
                "chunk_count": len(embedded),
                "placeholder_chunks": placeholder_chunks,
            },
        )

        return IngestedDocument(
            id=document.id,
            file_name=source.file_name,
            file_type=source.file_type,
            file_size=source.file_size,
            chunk_count=len(embedded),
            placeholder_chunks=placeholder_chunks,
        )
