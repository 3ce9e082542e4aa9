from ..infrastructure.app_factory import create_application
from ..infrastructure.config.settings import get_settings
from ..interfaces.api import router as api_router

settings = get_settings()

app = create_application(
    router=api_router,
    settings=settings,
    title="People Query API",
    summary="Natural-language questions over employee data and HR documents",
    description="""
    # People Query API

    Ask questions in plain language and get answers from two sources:

    * **Employee database**: counts, salaries, departments and other facts,
      answered with a synthesized read-only SQL query
    * **HR documents**: policies and handbooks, answered with the most
      relevant passages
    * **Both**: questions that need facts and policy context get both,
      merged into one answer

    ## Features

    - Schema discovery of SQLite and PostgreSQL databases
    - Document ingestion with format-aware chunking and embeddings
    - Answer caching, query history and usage metrics
    - Ingestion job tracking
    """,
    openapi_tags=[
        {"name": "Documents", "description": "Ingest and manage HR documents"},
        {"name": "Schema", "description": "Connect an employee database and discover its schema"},
        {"name": "Query", "description": "Ask questions, read history and metrics"},
        {"name": "Jobs", "description": "Ingestion job status"},
    ],
)
