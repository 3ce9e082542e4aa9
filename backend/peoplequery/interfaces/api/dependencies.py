"""FastAPI dependencies for use in API endpoints."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.completion import CompletionClient, get_completion_client
from ...infrastructure.config.settings import get_settings
from ...infrastructure.database import async_session
from ...infrastructure.embedding import EmbeddingBackend, get_embedding_backend
from ...modules.chunk.services import ChunkService
from ...modules.document.services import DocumentService
from ...modules.ingestion.chunker import Chunker
from ...modules.ingestion.embedder import Embedder
from ...modules.ingestion.pipeline import IngestionPipeline
from ...modules.ingestion.services import IngestionService
from ...modules.jobs.services import JobService
from ...modules.query.cache import QueryCache
from ...modules.query.classifier import QueryClassifier
from ...modules.query.engine import QueryEngine
from ...modules.query.fusion import ResultFusion
from ...modules.query.history import QueryLogger
from ...modules.query.metrics import QueryMetricsService
from ...modules.query.semantic import SemanticRetriever
from ...modules.query.structured import StructuredRetriever
from ...modules.query.synthesizer import QuerySynthesizer
from ...modules.schema.services import SchemaService

DbSession = Annotated[AsyncSession, Depends(async_session)]


def get_document_service() -> DocumentService:
    """Dependency for providing a DocumentService instance."""
    return DocumentService()


def get_chunk_service() -> ChunkService:
    """Dependency for providing a ChunkService instance."""
    return ChunkService()


def get_job_service() -> JobService:
    """Dependency for providing a JobService instance."""
    return JobService()


def get_schema_service(job_service: JobService = Depends(get_job_service)) -> SchemaService:
    """Dependency for providing a SchemaService instance."""
    return SchemaService(job_service)


def get_query_logger() -> QueryLogger:
    """Dependency for providing a QueryLogger instance."""
    return QueryLogger()


def get_embedder(backend: EmbeddingBackend = Depends(get_embedding_backend)) -> Embedder:
    """Dependency for providing an Embedder over the configured embedding backend."""
    return Embedder(backend, batch_size=get_settings().EMBEDDING_BATCH_SIZE)


def get_ingestion_service(
    embedder: Embedder = Depends(get_embedder),
    job_service: JobService = Depends(get_job_service),
) -> IngestionService:
    """Dependency for providing an IngestionService instance."""
    settings = get_settings()
    pipeline = IngestionPipeline(embedder, chunker=Chunker(overlap=settings.CHUNK_OVERLAP))
    return IngestionService(pipeline, job_service, max_upload_bytes=settings.MAX_UPLOAD_BYTES)


def get_query_engine(
    embedder: Embedder = Depends(get_embedder),
    completion_client: CompletionClient = Depends(get_completion_client),
    schema_service: SchemaService = Depends(get_schema_service),
    query_logger: QueryLogger = Depends(get_query_logger),
) -> QueryEngine:
    """Dependency for providing a QueryEngine wired from settings."""
    settings = get_settings()
    return QueryEngine(
        classifier=QueryClassifier(),
        cache=QueryCache(ttl_seconds=settings.QUERY_CACHE_TTL_SECONDS),
        synthesizer=QuerySynthesizer(completion_client),
        structured_retriever=StructuredRetriever(max_rows=settings.STRUCTURED_MAX_ROWS),
        semantic_retriever=SemanticRetriever(embedder),
        fusion=ResultFusion(),
        query_logger=query_logger,
        schema_service=schema_service,
        top_k=settings.SEMANTIC_TOP_K,
        fallback_row_limit=settings.FALLBACK_ROW_LIMIT,
        primary_entity_table=settings.PRIMARY_ENTITY_TABLE,
    )


def get_metrics_service(
    schema_service: SchemaService = Depends(get_schema_service),
    document_service: DocumentService = Depends(get_document_service),
    query_logger: QueryLogger = Depends(get_query_logger),
) -> QueryMetricsService:
    """Dependency for providing a QueryMetricsService instance."""
    return QueryMetricsService(schema_service, document_service=document_service, query_logger=query_logger)
