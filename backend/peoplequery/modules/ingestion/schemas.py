"""Pydantic schemas for document ingestion."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import SuccessResponse


class SourceFile(BaseModel):
    """An uploaded file as received by the API."""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(min_length=1, max_length=255)
    file_type: str = Field(default="application/octet-stream", max_length=255)
    content: bytes

    @property
    def file_size(self) -> int:
        return len(self.content)


class EmbeddedChunk(BaseModel):
    """A chunk of text with its vector, flagged when the vector is a placeholder."""

    model_config = ConfigDict(frozen=True)

    chunk_index: int
    content: str
    embedding: List[float]
    is_placeholder: bool = False


class IngestedDocument(BaseModel):
    """Summary of one stored document."""

    id: int
    file_name: str
    file_type: str
    file_size: int
    chunk_count: int
    placeholder_chunks: int = 0


class IngestResponse(SuccessResponse):
    job_id: str
    processed_count: int
    documents: List[IngestedDocument]
