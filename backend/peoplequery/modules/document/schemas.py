"""Pydantic schemas for document entities."""

from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import SuccessResponse, TimestampSchema


class DocumentBase(BaseModel):
    """Base schema for document data."""

    file_name: Annotated[str, Field(min_length=1, max_length=255, description="Original file name")]
    file_type: Annotated[str, Field(max_length=255, description="MIME type reported at upload")]
    file_size: Annotated[int, Field(ge=0, description="Size of the uploaded file in bytes")]


class DocumentCreateInternal(DocumentBase):
    """Schema used by the ingestion pipeline to persist a document."""

    content: str
    chunk_count: int = 0


class DocumentRead(TimestampSchema, DocumentBase):
    """Schema for reading document data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    chunk_count: int = Field(default=0, description="Number of chunks in document")


class DocumentDetail(DocumentRead):
    """Document including its full extracted text."""

    content: str


class DocumentDetailResponse(SuccessResponse):
    document: DocumentDetail


class DocumentListResponse(SuccessResponse):
    """Paginated document listing, newest first."""

    data: List[DocumentRead]
    total_count: int
    has_more: bool
    page: int
    items_per_page: int


class DocumentDeleteResponse(SuccessResponse):
    document_id: int
