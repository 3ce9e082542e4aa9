"""Shared response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class TimestampSchema(BaseModel):
    """Creation and modification timestamps of a stored record."""

    created_at: datetime
    updated_at: datetime


class SuccessResponse(BaseModel):
    """Base for every successful response body."""

    success: Literal[True] = True


class ErrorResponse(BaseModel):
    """Body of every failed request."""

    model_config = ConfigDict(json_schema_extra={"example": {"success": False, "error": "Job not found"}})

    success: Literal[False] = False
    error: str
