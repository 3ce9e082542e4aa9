"""Ingestion job bookkeeping service."""

import uuid
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import utcnow
from ...infrastructure.logging import get_logger
from ..common.exceptions import JobNotFoundError
from .crud import job_crud
from .models import IngestionJob
from .schemas import JobRead, JobStatus, JobType

logger = get_logger(__name__)


class JobService:
    """Service recording the lifecycle of ingestion and discovery jobs.

    Each state change is committed on its own so a job stays visible as
    ``processing`` while the work runs and as ``failed`` when the work's
    own transaction was rolled back.
    """

    async def create_job(
        self,
        job_type: JobType,
        db: AsyncSession,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Create a job in the ``processing`` state.

        Args:
            job_type: Kind of work the job tracks
            db: Database session
            metadata: Initial metadata (e.g. the number of uploaded files)

        Returns:
            The new job's public id
        """
        job = IngestionJob(
            job_id=str(uuid.uuid4()),
            job_type=job_type.value,
            status=JobStatus.PROCESSING.value,
            extra_metadata=dict(metadata or {}),
        )
        db.add(job)
        await db.commit()

        logger.info("Job started", extra={"job_id": job.job_id, "job_type": job_type.value})
        return job.job_id

    async def complete_job(self, job_id: str, db: AsyncSession, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Mark a job completed, merging ``metadata`` into what it already records."""
        await self._finish(job_id, JobStatus.COMPLETED, db, metadata or {})
        logger.info("Job completed", extra={"job_id": job_id})

    async def fail_job(self, job_id: str, db: AsyncSession, error: str) -> None:
        """Mark a job failed and record the error message."""
        await self._finish(job_id, JobStatus.FAILED, db, {"error": error})
        logger.warning("Job failed", extra={"job_id": job_id, "error": error})

    async def get_job(self, job_id: str, db: AsyncSession) -> JobRead:
        """Get a job's current status.

        Raises:
            JobNotFoundError: If no job has this id
        """
        job = await job_crud.get(db=db, job_id=job_id)
        if not job:
            raise JobNotFoundError()
        return JobRead.model_validate(job)

    async def _finish(self, job_id: str, status: JobStatus, db: AsyncSession, metadata: Dict[str, Any]) -> None:
        job = await job_crud.get(db=db, job_id=job_id)
        if not job:
            raise JobNotFoundError()

        merged = {**(job.get("extra_metadata") or {}), **metadata}
        await job_crud.update(
            db=db,
            object={"status": status.value, "completed_at": utcnow(), "extra_metadata": merged},
            job_id=job_id,
        )
