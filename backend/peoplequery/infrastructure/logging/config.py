"""Environment-aware logging setup.

Configuration by environment:
- Local/Development: colored detailed console output, optional structured file
- Staging: structured console output plus optional file
- Production: JSON console output, third-party loggers quietened
- Testing: a null handler so test output stays clean
"""

import contextvars
import logging
import uuid
from typing import List, Optional

from ..config.settings import EnvironmentOption, Settings, get_settings
from .handlers import create_console_handler, create_file_handler, create_null_handler

NO_CORRELATION = "no-correlation"

correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)


def setup_logging_configuration() -> None:
    """Configure the root logger from application settings.

    Called once during application startup; calling it again replaces
    the previously installed handlers.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        handlers = _production_handlers(settings)
    elif settings.ENVIRONMENT == EnvironmentOption.STAGING:
        handlers = _staging_handlers(settings)
    else:
        handlers = _development_handlers(settings)

    for handler in handlers:
        if settings.LOG_CORRELATION_ID:
            handler.addFilter(CorrelationIdFilter())
        root_logger.addHandler(handler)

    root_logger.setLevel(settings.LOG_LEVEL_INT)

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        _configure_noisy_loggers()


def _file_handler(settings: Settings) -> logging.Handler:
    return create_file_handler(
        filepath=settings.LOG_FILE_PATH,
        format_type="structured",
        level=logging.DEBUG,
        max_bytes=settings.LOG_FILE_MAX_SIZE,
        backup_count=settings.LOG_FILE_BACKUP_COUNT,
    )


def _development_handlers(settings: Settings) -> List[logging.Handler]:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.DEBUG if settings.LOG_DEVELOPMENT_VERBOSE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="detailed", level=console_level, use_colors=True))

    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))

    return handlers


def _staging_handlers(settings: Settings) -> List[logging.Handler]:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        handlers.append(create_console_handler(format_type=settings.LOG_FORMAT, level=settings.LOG_LEVEL_INT, use_colors=False))

    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))

    return handlers


def _production_handlers(settings: Settings) -> List[logging.Handler]:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.WARNING if settings.LOG_PRODUCTION_OPTIMIZE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="json", level=console_level, use_colors=False))

    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))

    return handlers


def _configure_noisy_loggers() -> None:
    """Raise the threshold of chatty third-party loggers."""
    noisy_loggers = {
        "asyncpg": logging.WARNING,
        "aiosqlite": logging.WARNING,
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
        "sentence_transformers": logging.WARNING,
        "sqlalchemy.engine": logging.WARNING,
        "sqlalchemy.pool": logging.WARNING,
    }

    for logger_name, level in noisy_loggers.items():
        logging.getLogger(logger_name).setLevel(level)


def configure_testing_logging() -> None:
    """Install a null handler so tests only surface errors."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(create_null_handler())
    root_logger.setLevel(logging.ERROR)

    for logger_name in ("sqlalchemy.engine", "aiosqlite", "asyncpg", "httpx"):
        logging.getLogger(logger_name).setLevel(logging.ERROR)


class CorrelationIdFilter(logging.Filter):
    """Stamp each record with the correlation id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or NO_CORRELATION
        return True


def set_correlation_id(correlation_id: Optional[str]) -> contextvars.Token:
    """Bind a correlation id to the current context.

    Returns:
        Token that restores the previous value when passed to ``reset_correlation_id``.
    """
    return correlation_id_var.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    correlation_id_var.reset(token)


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


def generate_correlation_id() -> str:
    return uuid.uuid4().hex
