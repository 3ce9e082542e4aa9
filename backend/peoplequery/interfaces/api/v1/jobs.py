"""Ingestion job status endpoint."""

from fastapi import APIRouter, Depends

from ....modules.common.utils.error_handler import handle_exception
from ....modules.jobs.schemas import JobStatusResponse
from ....modules.jobs.services import JobService
from ..dependencies import DbSession, get_job_service

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get(
    "/{job_id}",
    summary="Get Job Status",
    description="Returns the status of a document ingestion or database connection job.",
    responses={
        200: {"description": "Job status"},
        404: {"description": "Job not found"},
    },
)
async def get_job_status(
    job_id: str,
    db: DbSession,
    job_service: JobService = Depends(get_job_service),
) -> JobStatusResponse:
    """Get a job by its id."""
    try:
        return JobStatusResponse(job=await job_service.get_job(job_id, db))
    except Exception as e:
        raise handle_exception(e)
