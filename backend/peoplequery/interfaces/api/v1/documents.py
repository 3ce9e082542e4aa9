"""Document ingestion and management endpoints."""

from typing import Annotated, List

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from ....modules.chunk.schemas import ChunkListResponse
from ....modules.chunk.services import ChunkService
from ....modules.common.utils.error_handler import handle_exception
from ....modules.document.schemas import DocumentDeleteResponse, DocumentDetailResponse, DocumentListResponse
from ....modules.document.services import DocumentService
from ....modules.ingestion.schemas import IngestResponse, SourceFile
from ....modules.ingestion.services import IngestionService
from ..dependencies import DbSession, get_chunk_service, get_document_service, get_ingestion_service

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post(
    "/ingest",
    status_code=status.HTTP_201_CREATED,
    summary="Ingest Documents",
    description="""
    Uploads one or more files and indexes them for semantic search.

    Each file is extracted to text, split into overlapping chunks sized by
    its format and embedded. The document and its chunks become visible
    together once the file is fully processed. The whole upload is tracked
    as a `documents` job.

    - **files**: One or more files (multipart form field `files`)
    """,
    responses={
        201: {"description": "Files ingested"},
        400: {"description": "No files, or a file is too large"},
        500: {"description": "A file could not be stored"},
    },
)
async def ingest_documents(
    db: DbSession,
    files: List[UploadFile] = File(..., description="Files to ingest"),
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> IngestResponse:
    """Ingest uploaded files."""
    try:
        sources = [
            SourceFile(
                file_name=upload.filename or "untitled",
                file_type=upload.content_type or "application/octet-stream",
                content=await upload.read(),
            )
            for upload in files
        ]
        return await ingestion_service.ingest_files(sources, db)
    except Exception as e:
        raise handle_exception(e)


@router.get(
    "/",
    summary="List Documents",
    description="""
    Retrieves a paginated list of ingested documents, newest first.

    - **page**: Page number (1-indexed, default: 1)
    - **items_per_page**: Number of documents per page (default: 50, max: 100)
    """,
    responses={200: {"description": "Paginated list of documents"}},
)
async def list_documents(
    db: DbSession,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    items_per_page: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 50,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """Get documents with pagination."""
    try:
        return DocumentListResponse(**await document_service.get_documents(db, page, items_per_page))
    except Exception as e:
        raise handle_exception(e)


@router.get(
    "/{document_id}",
    summary="Get Document",
    description="Retrieves a document with its extracted text and chunk count.",
    responses={
        200: {"description": "Document details"},
        404: {"description": "Document not found"},
    },
)
async def get_document(
    document_id: int,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentDetailResponse:
    """Get a specific document by ID."""
    try:
        return DocumentDetailResponse(document=await document_service.get_document(document_id, db))
    except Exception as e:
        raise handle_exception(e)


@router.get(
    "/{document_id}/chunks",
    summary="List Document Chunks",
    description="Retrieves the chunks of a document ordered by position.",
    responses={
        200: {"description": "Chunks of the document"},
        404: {"description": "Document not found"},
    },
)
async def list_document_chunks(
    document_id: int,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
    chunk_service: ChunkService = Depends(get_chunk_service),
) -> ChunkListResponse:
    """Get all chunks of a document."""
    try:
        await document_service.get_document(document_id, db)
        chunks = await chunk_service.get_chunks_by_document(document_id, db)
        return ChunkListResponse(document_id=document_id, chunks=chunks, count=len(chunks))
    except Exception as e:
        raise handle_exception(e)


@router.delete(
    "/{document_id}",
    summary="Delete Document",
    description="Deletes a document together with all of its chunks.",
    responses={
        200: {"description": "Document deleted"},
        404: {"description": "Document not found"},
    },
)
async def delete_document(
    document_id: int,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentDeleteResponse:
    """Delete a document."""
    try:
        await document_service.delete_document(document_id, db)
        return DocumentDeleteResponse(document_id=document_id)
    except Exception as e:
        raise handle_exception(e)
