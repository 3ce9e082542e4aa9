"""Schema discovery service."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..common.exceptions import ConnectionFailedError
from ..jobs.schemas import JobType
from ..jobs.services import JobService
from .connection import discard_target_engine, get_target_engine, mask_url, normalize_connection_url
from .crud import schema_crud
from .discoverer import SchemaDiscoverer
from .models import DatabaseSchema
from .schemas import ConnectRequest, ConnectResponse, CurrentSchema, DatabaseType, SchemaDescription

logger = get_logger(__name__)

NO_SCHEMA_MESSAGE = "No schema discovered yet. Please connect a database first."


class SchemaService:
    """Connects to a target database, discovers its schema and stores the result.

    Every connection attempt is tracked as a ``database`` job. Job
    metadata records the database type and the URL with its password
    masked; the full URL is only stored on the schema row.
    """

    def __init__(self, job_service: JobService, discoverer: Optional[SchemaDiscoverer] = None):
        self.job_service = job_service
        self.discoverer = discoverer or SchemaDiscoverer()

    async def connect(self, request: ConnectRequest, db: AsyncSession) -> ConnectResponse:
        """Discover and store the schema of the database in ``request``.

        Args:
            request: Connection string and database type
            db: Database session

        Returns:
            The job id and the discovered schema

        Raises:
            ValidationError: If the connection string is malformed
            ConnectionFailedError: If the database cannot be reached
        """
        url = normalize_connection_url(request.connection_string, request.database_type)
        job_id = await self.job_service.create_job(
            JobType.DATABASE,
            db,
            {"database_type": request.database_type.value, "connection": mask_url(url)},
        )

        try:
            schema = await self.discoverer.discover(get_target_engine(url))
        except ConnectionFailedError as e:
            await discard_target_engine(url)
            await self.job_service.fail_job(job_id, db, str(e))
            raise

        db.add(
            DatabaseSchema(
                job_id=job_id,
                database_type=request.database_type.value,
                connection_url=url.render_as_string(hide_password=False),
                schema_data=schema.model_dump(mode="json"),
            )
        )
        await db.commit()

        await self.job_service.complete_job(
            job_id,
            db,
            {"table_count": len(schema.tables), "relationship_count": len(schema.relationships)},
        )
        return ConnectResponse(job_id=job_id, schema_=schema)

    async def get_current(self, db: AsyncSession) -> Optional[CurrentSchema]:
        """Get the most recently discovered schema, or None before the first discovery."""
        result = await schema_crud.get_multi(
            db=db,
            limit=1,
            sort_columns=["created_at", "id"],
            sort_orders=["desc", "desc"],
        )
        rows = result.get("data", [])
        if not rows:
            return None

        row = rows[0]
        return CurrentSchema(
            description=SchemaDescription.model_validate(row["schema_data"]),
            database_type=DatabaseType(row["database_type"]),
            connection_url=row["connection_url"],
            discovered_at=row["created_at"],
        )
