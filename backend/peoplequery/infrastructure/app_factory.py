from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Dict, List, Optional, Union

import anyio
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from ..modules.common.utils.error_handler import register_exception_handlers
from ..modules.schema.connection import dispose_target_engines
from .config.settings import (
    DatabaseSettings,
    EnvironmentOption,
    EnvironmentSettings,
    Settings,
    get_settings,
)
from .database.session import create_tables
from .logging import (
    configure_logging,
    generate_correlation_id,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger(__name__)


async def set_threadpool_tokens(number_of_tokens: int = 100) -> None:
    """Configure the number of threadpool tokens for anyio."""
    limiter = anyio.to_thread.current_default_thread_limiter()
    limiter.total_tokens = number_of_tokens


def lifespan_factory(
    settings: Settings,
    create_tables_on_startup: bool = True,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Factory to create a lifespan async context manager for a FastAPI app.

    Args:
        settings: Application settings
        create_tables_on_startup: Whether to create database tables on startup

    Returns:
        An async context manager for FastAPI's lifespan
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        configure_logging()
        await set_threadpool_tokens()

        try:
            if isinstance(settings, DatabaseSettings) and create_tables_on_startup:
                await create_tables()

            logger.info("Application started", extra={"environment": getattr(settings, "ENVIRONMENT", None)})
            yield

        finally:
            await dispose_target_engines()

    return lifespan


async def correlation_id_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Tag everything logged while serving a request with its request id.

    The id is taken from the incoming ``X-Request-ID`` header when present
    and echoed back on the response.
    """
    correlation_id = request.headers.get(REQUEST_ID_HEADER) or generate_correlation_id()
    token = set_correlation_id(correlation_id)
    try:
        response = await call_next(request)
    finally:
        reset_correlation_id(token)
    response.headers[REQUEST_ID_HEADER] = correlation_id
    return response


def _resolve(explicit: Any, settings: Settings, name: str, default: Any) -> Any:
    """Pick an explicit argument, else the named setting, else ``default``."""
    if explicit is not None:
        return explicit
    return getattr(settings, name, default)


def _split(value: Union[str, List[str]]) -> List[str]:
    return value.split(",") if isinstance(value, str) else value


def create_application(
    router: APIRouter,
    settings: Optional[Settings] = None,
    lifespan: Optional[Callable[[FastAPI], AbstractAsyncContextManager[None]]] = None,
    create_tables_on_startup: Optional[bool] = None,
    enable_cors: Optional[bool] = None,
    cors_origins: Optional[List[str]] = None,
    enable_docs_in_production: Optional[bool] = None,
    enable_gzip: Optional[bool] = None,
    title: Optional[str] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    version: Optional[str] = None,
    openapi_tags: Optional[List[Dict[str, Any]]] = None,
    **kwargs: Any,
) -> FastAPI:
    """Build the FastAPI application: routes, error envelope, request ids, CORS and compression.

    Every optional argument overrides the matching setting; settings fall
    back to permissive defaults when a settings object lacks them.

    Args:
        router: Router holding every API route
        settings: Application settings (``get_settings()`` if None)
        lifespan: Custom lifespan; the default configures logging, creates
            tables when enabled and disposes target database engines on shutdown
        create_tables_on_startup: Overrides ``CREATE_TABLES_ON_STARTUP``
        enable_cors: Overrides ``CORS_ENABLED``
        cors_origins: Overrides ``CORS_ORIGINS``
        enable_docs_in_production: Overrides ``ENABLE_DOCS_IN_PRODUCTION``
        enable_gzip: Overrides ``GZIP_ENABLED``
        title: OpenAPI title (defaults to ``APP_NAME``)
        summary: OpenAPI summary
        description: OpenAPI description, Markdown allowed (defaults to ``APP_DESCRIPTION``)
        version: API version (defaults to ``VERSION``)
        openapi_tags: Tag metadata for the OpenAPI document
        **kwargs: Passed through to ``FastAPI``

    Returns:
        The configured application
    """
    settings = settings or get_settings()

    kwargs.update(
        title=title or getattr(settings, "APP_NAME", "API"),
        description=description or getattr(settings, "APP_DESCRIPTION", ""),
        version=version or getattr(settings, "VERSION", "0.1.0"),
        docs_url=getattr(settings, "DOCS_URL", "/docs"),
        redoc_url=getattr(settings, "REDOC_URL", "/redoc"),
        openapi_url=getattr(settings, "OPENAPI_URL", "/openapi.json"),
    )
    if summary is not None:
        kwargs["summary"] = summary
    if openapi_tags is not None:
        kwargs["openapi_tags"] = openapi_tags

    in_production = (
        isinstance(settings, EnvironmentSettings) and settings.ENVIRONMENT == EnvironmentOption.PRODUCTION
    )
    if in_production and not _resolve(enable_docs_in_production, settings, "ENABLE_DOCS_IN_PRODUCTION", False):
        kwargs.update(docs_url=None, redoc_url=None, openapi_url=None)

    if lifespan is None:
        lifespan = lifespan_factory(
            settings,
            create_tables_on_startup=_resolve(create_tables_on_startup, settings, "CREATE_TABLES_ON_STARTUP", True),
        )

    application = FastAPI(lifespan=lifespan, **kwargs)

    register_exception_handlers(application)
    application.include_router(router)

    application.middleware("http")(correlation_id_middleware)

    if _resolve(enable_cors, settings, "CORS_ENABLED", True):
        application.add_middleware(
            CORSMiddleware,
            allow_origins=_resolve(cors_origins, settings, "CORS_ORIGINS_LIST", ["*"]),
            allow_credentials=getattr(settings, "CORS_ALLOW_CREDENTIALS", False),
            allow_methods=_split(getattr(settings, "CORS_ALLOW_METHODS", ["*"])),
            allow_headers=_split(getattr(settings, "CORS_ALLOW_HEADERS", ["*"])),
            expose_headers=[REQUEST_ID_HEADER],
        )

    if _resolve(enable_gzip, settings, "GZIP_ENABLED", True):
        application.add_middleware(GZipMiddleware, minimum_size=getattr(settings, "GZIP_MINIMUM_SIZE", 1000))

    return application
