"""Domain exception classes for business logic errors."""


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ValidationError(DomainError):
    """Raised when client input is missing or malformed."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    pass


class DocumentNotFoundError(ResourceNotFoundError):
    """Raised when a document cannot be found."""

    pass


class JobNotFoundError(ResourceNotFoundError):
    """Raised when an ingestion job id is unknown."""

    def __init__(self, message: str = "Job not found"):
        super().__init__(message)


class UpstreamUnavailableError(DomainError):
    """Raised when an external collaborator cannot be reached or answers with an error."""

    pass


class SynthesisUnavailableError(UpstreamUnavailableError):
    """Raised when the completion service cannot turn a question into a query."""

    pass


class EmbeddingUnavailableError(UpstreamUnavailableError):
    """Raised when an embedding cannot be produced."""

    pass


class ConnectionFailedError(UpstreamUnavailableError):
    """Raised when a target database is unreachable or rejects the credentials."""

    pass


class UnsafeQueryRejectedError(DomainError):
    """Raised when a synthesized query is not a single read-only statement."""

    pass


class StructuredQueryError(DomainError):
    """Raised when a validated read-only query fails during execution."""

    pass


class IngestionFailedError(DomainError):
    """Raised when an uploaded file cannot be ingested."""

    pass


class InternalError(DomainError):
    """Raised for unexpected failures; the detail is logged, never returned."""

    pass
