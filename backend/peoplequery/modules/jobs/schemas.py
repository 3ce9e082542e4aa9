"""Pydantic schemas for ingestion jobs."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.schemas import SuccessResponse


class JobType(str, Enum):
    DOCUMENTS = "documents"
    DATABASE = "database"


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobRead(BaseModel):
    """Status of an ingestion job as reported to clients."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str
    type: JobType = Field(validation_alias="job_type")
    status: JobStatus
    created_at: datetime
    completed_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="extra_metadata")

    @field_validator("metadata", mode="before")
    @classmethod
    def default_metadata(cls, v: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return v or {}


class JobStatusResponse(SuccessResponse):
    job: JobRead
