from fastapi import APIRouter

from .documents import router as documents_router
from .jobs import router as jobs_router
from .query import router as query_router
from .schema import router as schema_router

router = APIRouter(prefix="/v1")
router.include_router(documents_router)
router.include_router(schema_router)
router.include_router(query_router)
router.include_router(jobs_router)


@router.get(
    "/health",
    summary="API Health Check",
    description="Simple health check endpoint for monitoring and container orchestration.",
    responses={
        200: {"description": "API is healthy and responding"},
    },
)
async def health_check():
    """Health check endpoint for Docker health checks."""
    return {"success": True, "status": "healthy", "message": "People Query API is running"}
