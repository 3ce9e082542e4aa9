"""Pydantic schemas for chunk entities."""

from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.schemas import SuccessResponse, TimestampSchema


class ChunkCreateInternal(BaseModel):
    """A chunk ready to be stored, as produced by the ingestion pipeline."""

    chunk_index: Annotated[int, Field(ge=0)]
    content: Annotated[str, Field(min_length=1)]
    embedding: List[float]
    is_placeholder: bool = False

    @field_validator("embedding")
    @classmethod
    def validate_embedding(cls, v: List[float]) -> List[float]:
        if not v:
            raise ValueError("Embedding cannot be empty")
        if len(v) > 4096:
            raise ValueError("Embedding dimension too large (max 4096)")
        return v


class ChunkRead(TimestampSchema):
    """Schema for reading chunk data; the vector itself is summarized by its length."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    document_id: int
    chunk_index: int
    content: str
    embedding_dimension: int
    is_placeholder: bool


class ChunkListResponse(SuccessResponse):
    document_id: int
    chunks: List[ChunkRead]
    count: int
