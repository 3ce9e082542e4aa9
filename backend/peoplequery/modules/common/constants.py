"""Common constants used across the application."""

from typing import Dict, Type

from fastapi import status

from .exceptions import (
    ConnectionFailedError,
    DomainError,
    IngestionFailedError,
    InternalError,
    ResourceNotFoundError,
    StructuredQueryError,
    UnsafeQueryRejectedError,
    UpstreamUnavailableError,
    ValidationError,
)

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Checked in order; subclasses must precede their bases.
EXCEPTION_MAPPING: Dict[Type[DomainError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ResourceNotFoundError: status.HTTP_404_NOT_FOUND,
    ConnectionFailedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    UpstreamUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    UnsafeQueryRejectedError: status.HTTP_400_BAD_REQUEST,
    StructuredQueryError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    IngestionFailedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    InternalError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}
