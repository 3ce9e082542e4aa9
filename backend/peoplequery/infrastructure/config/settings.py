import logging
import os
from enum import Enum
from typing import List

from pydantic_settings import BaseSettings
from starlette.config import Config

logger = logging.getLogger(__name__)

current_file_dir = os.path.dirname(os.path.realpath(__file__))
project_root = os.path.abspath(os.path.join(current_file_dir, "..", "..", "..", ".."))

env_paths = [
    "/code/.env",
    os.path.join(project_root, ".env"),
    "/.env",
]

env_path = next((path for path in env_paths if os.path.isfile(path)), env_paths[0])
logger.info(f"Using environment file at: {env_path}")

config = Config(env_path)


class EnvironmentOption(str, Enum):
    """Environment options for the application."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    LOCAL = "local"


class DatabaseBackend(str, Enum):
    """Relational backends the document/query store can run on."""

    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"


class EmbeddingProvider(str, Enum):
    """Where chunk and question embeddings are computed."""

    REMOTE = "remote"
    LOCAL = "local"


class EnvironmentSettings(BaseSettings):
    """Environment-related settings."""

    ENVIRONMENT: EnvironmentOption = config("ENVIRONMENT", default=EnvironmentOption.DEVELOPMENT, cast=EnvironmentOption)


class DatabaseSettings(BaseSettings):
    """Database-related settings for the store holding documents, cache and logs."""

    DATABASE_BACKEND: DatabaseBackend = config("DATABASE_BACKEND", default=DatabaseBackend.POSTGRESQL, cast=DatabaseBackend)

    POSTGRES_USER: str = config("POSTGRES_USER", default="postgres")
    POSTGRES_PASSWORD: str = config("POSTGRES_PASSWORD", default="postgres")
    POSTGRES_SERVER: str = config("POSTGRES_SERVER", default="localhost")
    POSTGRES_PORT: int = config("POSTGRES_PORT", default=5432, cast=int)
    POSTGRES_DB: str = config("POSTGRES_DB", default="postgres")
    POSTGRES_ASYNC_PREFIX: str = config("POSTGRES_ASYNC_PREFIX", default="postgresql+asyncpg://")
    POSTGRES_POOL_SIZE: int = config("POSTGRES_POOL_SIZE", default=20, cast=int)
    POSTGRES_MAX_OVERFLOW: int = config("POSTGRES_MAX_OVERFLOW", default=0, cast=int)

    SQLITE_URI: str = config("SQLITE_URI", default="./peoplequery.db")
    SQLITE_ASYNC_PREFIX: str = config("SQLITE_ASYNC_PREFIX", default="sqlite+aiosqlite:///")

    CREATE_TABLES_ON_STARTUP: bool = config("CREATE_TABLES_ON_STARTUP", default=True, cast=bool)

    @property
    def DATABASE_URL(self) -> str:
        """Get the full async database URL for the configured backend."""
        if self.DATABASE_BACKEND == DatabaseBackend.SQLITE:
            return f"{self.SQLITE_ASYNC_PREFIX}{self.SQLITE_URI}"
        return (
            f"{self.POSTGRES_ASYNC_PREFIX}{self.POSTGRES_USER}:"
            f"{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:"
            f"{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


class CORSSettings(BaseSettings):
    """CORS-related settings."""

    CORS_ENABLED: bool = config("CORS_ENABLED", default=True, cast=bool)
    CORS_ORIGINS: str = config("CORS_ORIGINS", default="*")
    CORS_ALLOW_CREDENTIALS: bool = config("CORS_ALLOW_CREDENTIALS", default=False, cast=bool)
    CORS_ALLOW_METHODS: str = config("CORS_ALLOW_METHODS", default="*")
    CORS_ALLOW_HEADERS: str = config("CORS_ALLOW_HEADERS", default="*")

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        """Get CORS origins as a list."""
        if not self.CORS_ORIGINS:
            return ["*"]
        return [x.strip() for x in self.CORS_ORIGINS.split(",") if x.strip()]


class CompressionSettings(BaseSettings):
    """Compression-related settings."""

    GZIP_ENABLED: bool = config("GZIP_ENABLED", default=True, cast=bool)
    GZIP_MINIMUM_SIZE: int = config("GZIP_MINIMUM_SIZE", default=1000, cast=int)


class APIDocSettings(BaseSettings):
    """API documentation settings."""

    ENABLE_DOCS_IN_PRODUCTION: bool = config("ENABLE_DOCS_IN_PRODUCTION", default=False, cast=bool)
    DOCS_URL: str = config("DOCS_URL", default="/docs")
    REDOC_URL: str = config("REDOC_URL", default="/redoc")
    OPENAPI_URL: str = config("OPENAPI_URL", default="/openapi.json")


class APISettings(BaseSettings):
    """API-related settings."""

    API_PREFIX: str = "/api"


class AppSettings(BaseSettings):
    """Application-related settings."""

    APP_NAME: str = "People Query API"
    APP_DESCRIPTION: str = "Natural-language questions over employee records and HR documents"
    DEBUG: bool = config("DEBUG", default=False, cast=bool)
    VERSION: str = "0.1.0"


class LoggingSettings(BaseSettings):
    """Centralized logging configuration settings."""

    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")
    LOG_FORMAT: str = config("LOG_FORMAT", default="structured")  # "simple", "detailed", "structured", "json"

    LOG_CONSOLE_ENABLED: bool = config("LOG_CONSOLE_ENABLED", default=True, cast=bool)
    LOG_FILE_ENABLED: bool = config("LOG_FILE_ENABLED", default=False, cast=bool)
    LOG_FILE_PATH: str = config("LOG_FILE_PATH", default="logs/peoplequery.log")
    LOG_FILE_MAX_SIZE: int = config("LOG_FILE_MAX_SIZE", default=10485760, cast=int)
    LOG_FILE_BACKUP_COUNT: int = config("LOG_FILE_BACKUP_COUNT", default=5, cast=int)

    LOG_CORRELATION_ID: bool = config("LOG_CORRELATION_ID", default=True, cast=bool)
    LOG_DEVELOPMENT_VERBOSE: bool = config("LOG_DEVELOPMENT_VERBOSE", default=True, cast=bool)
    LOG_PRODUCTION_OPTIMIZE: bool = config("LOG_PRODUCTION_OPTIMIZE", default=True, cast=bool)

    @property
    def LOG_LEVEL_INT(self) -> int:
        """Convert string log level to integer."""
        level_map = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return level_map.get(self.LOG_LEVEL.upper(), logging.INFO)


class CompletionSettings(BaseSettings):
    """Settings for the OpenAI-compatible completion and embedding gateway."""

    COMPLETION_API_URL: str = config("COMPLETION_API_URL", default="https://api.openai.com/v1")
    COMPLETION_API_KEY: str = config("COMPLETION_API_KEY", default="")
    COMPLETION_MODEL: str = config("COMPLETION_MODEL", default="gpt-4o-mini")
    COMPLETION_TIMEOUT_SECONDS: float = config("COMPLETION_TIMEOUT_SECONDS", default=20.0, cast=float)
    COMPLETION_MAX_RETRIES: int = config("COMPLETION_MAX_RETRIES", default=3, cast=int)

    EMBEDDING_PROVIDER: EmbeddingProvider = config("EMBEDDING_PROVIDER", default=EmbeddingProvider.REMOTE, cast=EmbeddingProvider)
    EMBEDDING_MODEL: str = config("EMBEDDING_MODEL", default="text-embedding-3-small")
    LOCAL_EMBEDDING_MODEL: str = config("LOCAL_EMBEDDING_MODEL", default="all-mpnet-base-v2")
    EMBEDDING_DIMENSION: int = config("EMBEDDING_DIMENSION", default=768, cast=int)


class QuerySettings(BaseSettings):
    """Settings for question answering."""

    QUERY_CACHE_TTL_SECONDS: int = config("QUERY_CACHE_TTL_SECONDS", default=3600, cast=int)
    STRUCTURED_MAX_ROWS: int = config("STRUCTURED_MAX_ROWS", default=100, cast=int)
    FALLBACK_ROW_LIMIT: int = config("FALLBACK_ROW_LIMIT", default=10, cast=int)
    PRIMARY_ENTITY_TABLE: str = config("PRIMARY_ENTITY_TABLE", default="employees")
    SEMANTIC_TOP_K: int = config("SEMANTIC_TOP_K", default=5, cast=int)


class IngestionSettings(BaseSettings):
    """Settings for document ingestion."""

    CHUNK_OVERLAP: int = config("CHUNK_OVERLAP", default=100, cast=int)
    EMBEDDING_BATCH_SIZE: int = config("EMBEDDING_BATCH_SIZE", default=10, cast=int)
    MAX_UPLOAD_BYTES: int = config("MAX_UPLOAD_BYTES", default=20 * 1024 * 1024, cast=int)


class Settings(
    EnvironmentSettings,
    DatabaseSettings,
    CORSSettings,
    CompressionSettings,
    APIDocSettings,
    APISettings,
    AppSettings,
    LoggingSettings,
    CompletionSettings,
    QuerySettings,
    IngestionSettings,
):
    """Main settings class that combines all setting categories."""

    pass


settings = Settings()


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        The application settings.
    """
    return settings
