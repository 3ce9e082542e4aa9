"""Document ingestion service with job tracking."""

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..common.exceptions import IngestionFailedError, ValidationError
from ..jobs.schemas import JobType
from ..jobs.services import JobService
from .pipeline import IngestionPipeline
from .schemas import IngestedDocument, IngestResponse, SourceFile

logger = get_logger(__name__)


class IngestionService:
    """Ingests a set of uploaded files under one ``documents`` job.

    Files are processed one after another, each in its own transaction; a
    failure stops the run, marks the job failed and leaves the documents
    ingested before it in place.
    """

    def __init__(self, pipeline: IngestionPipeline, job_service: JobService, max_upload_bytes: int):
        self.pipeline = pipeline
        self.job_service = job_service
        self.max_upload_bytes = max_upload_bytes

    async def ingest_files(self, files: List[SourceFile], db: AsyncSession) -> IngestResponse:
        """Ingest uploaded files.

        Args:
            files: Uploaded files
            db: Database session

        Returns:
            The job id and a summary per stored document

        Raises:
            ValidationError: If no file was uploaded or one exceeds the size limit
            IngestionFailedError: If a file could not be stored
        """
        if not files:
            raise ValidationError("No files provided")

        for source in files:
            if source.file_size > self.max_upload_bytes:
                raise ValidationError(f"File {source.file_name} exceeds the {self.max_upload_bytes} byte upload limit")

        job_id = await self.job_service.create_job(JobType.DOCUMENTS, db, {"file_count": len(files)})

        documents: List[IngestedDocument] = []
        for source in files:
            try:
                documents.append(await self.pipeline.ingest(source, db))
            except Exception as e:
                await db.rollback()
                logger.exception("Document ingestion failed", extra={"job_id": job_id, "file_name": source.file_name})
                await self.job_service.fail_job(job_id, db, f"Failed to ingest {source.file_name}: {e}")
                raise IngestionFailedError(f"Failed to ingest {source.file_name}") from e

        await self.job_service.complete_job(
            job_id,
            db,
            {"processed_count": len(documents), "document_ids": [document.id for document in documents]},
        )

        return IngestResponse(job_id=job_id, processed_count=len(documents), documents=documents)
