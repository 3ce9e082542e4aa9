"""Logger factory with lazy, settings-driven configuration.

Every module obtains its logger through ``get_logger``; the first call
installs the handlers appropriate to the configured environment.
"""

import inspect
import logging
from threading import Lock
from typing import Optional, Union

from ..config.settings import get_settings
from .config import setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


def get_logger(name: Optional[str] = None, **extra_context) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a logger, configuring the logging system on first use.

    Args:
        name: Logger name. If None, the calling module's name is used.
        **extra_context: Context attached to every record the logger emits.

    Returns:
        A logger, or a ``LoggerAdapter`` when extra context was supplied.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Documents ingested", extra={"job_id": job_id, "processed_count": 3})
        ```
    """
    _ensure_logging_configured()

    if name is None:
        name = _detect_calling_module()

    base_logger = logging.getLogger(name)
    if extra_context:
        return logging.LoggerAdapter(base_logger, extra_context)
    return base_logger


def configure_logging(force: bool = False) -> None:
    """Configure logging now instead of on the first ``get_logger`` call.

    Args:
        force: Reinstall handlers even when logging is already configured.
    """
    global _logging_configured

    with _configuration_lock:
        if _logging_configured and not force:
            return

        setup_logging_configuration()
        _logging_configured = True

        settings = get_settings()
        logging.getLogger(__name__).info(
            f"Logging configured for {settings.ENVIRONMENT.value} environment",
            extra={
                "log_level": settings.LOG_LEVEL,
                "log_format": settings.LOG_FORMAT,
                "console_enabled": settings.LOG_CONSOLE_ENABLED,
                "file_enabled": settings.LOG_FILE_ENABLED,
            },
        )


def mark_logging_configured() -> None:
    """Stop ``get_logger`` from installing handlers (used when tests configure logging themselves)."""
    global _logging_configured
    _logging_configured = True


def _ensure_logging_configured() -> None:
    if not _logging_configured:
        configure_logging()


def _detect_calling_module() -> str:
    frame = inspect.currentframe()
    try:
        for _ in range(2):
            if frame is None:
                break
            frame = frame.f_back

        if frame is not None:
            return str(frame.f_globals.get("__name__", "unknown"))
        return "unknown"
    finally:
        del frame
