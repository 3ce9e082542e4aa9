"""Database connection and schema discovery endpoints."""

from fastapi import APIRouter, Depends, status

from ....modules.common.utils.error_handler import handle_exception
from ....modules.schema.schemas import ConnectRequest, ConnectResponse, CurrentSchemaResponse
from ....modules.schema.services import NO_SCHEMA_MESSAGE, SchemaService
from ..dependencies import DbSession, get_schema_service

router = APIRouter(prefix="/schema", tags=["Schema"])


@router.post(
    "/connect",
    status_code=status.HTTP_201_CREATED,
    summary="Connect Database",
    description="""
    Connects to an employee database and discovers its schema.

    Tables, columns, primary keys, row counts, two sample rows per table and
    the relationships between tables (declared foreign keys and
    `<name>_id` naming conventions) are recorded. The discovered schema
    becomes the one questions are answered against.

    - **connection_string**: SQLAlchemy URL, or a file path for SQLite
    - **database_type**: `sqlite` or `postgresql`
    """,
    responses={
        201: {"description": "Schema discovered"},
        400: {"description": "Malformed connection string"},
        500: {"description": "Database unreachable or connection rejected"},
    },
)
async def connect_database(
    request: ConnectRequest,
    db: DbSession,
    schema_service: SchemaService = Depends(get_schema_service),
) -> ConnectResponse:
    """Discover and store the schema of a database."""
    try:
        return await schema_service.connect(request, db)
    except Exception as e:
        raise handle_exception(e)


@router.get(
    "/",
    summary="Get Current Schema",
    description="Returns the most recently discovered schema, or `schema: null` before the first connection.",
    responses={200: {"description": "Current schema"}},
)
async def get_current_schema(
    db: DbSession,
    schema_service: SchemaService = Depends(get_schema_service),
) -> CurrentSchemaResponse:
    """Get the current schema."""
    try:
        current = await schema_service.get_current(db)
        if current is None:
            return CurrentSchemaResponse(message=NO_SCHEMA_MESSAGE)
        return CurrentSchemaResponse(
            schema_=current.description,
            database_type=current.database_type,
            discovered_at=current.discovered_at,
        )
    except Exception as e:
        raise handle_exception(e)
