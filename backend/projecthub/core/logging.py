"""
Structured logging for ProjectHub.

Two channels share one structlog pipeline:

* module loggers from ``get_logger(__name__)`` for application events;
* the audit channel (``AUDIT_LOGGER``) used by the authorization gate.
  It stays at INFO even when ``LOG_LEVEL`` is raised, so denied requests
  are never filtered out.

Console rendering is used in development, one JSON object per line elsewhere
(or whenever ``LOG_JSON=1``).
"""

import logging
import sys
from typing import Any

import structlog
from projecthub.core.settings import settings

AUDIT_LOGGER = "projecthub.audit"

# Шумные сторонние логгеры
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "multipart")


def _add_service(_: Any, __: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", "projecthub")
    event_dict.setdefault("env", settings.environment)
    return event_dict


def _renderer() -> Any:
    if settings.log_json or not settings.is_development:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=not settings.testing)


def configure_logging() -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _renderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.DEBUG if settings.app_debug else logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    logging.getLogger(AUDIT_LOGGER).setLevel(min(level, logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """
    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("member_added", project_id=project_id, user_id=user_id)
    """
    return structlog.get_logger(name)


def get_audit_logger() -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(AUDIT_LOGGER)


def bind_principal(user_id: str) -> None:
    """Attach the authenticated user to every log line of the current request."""
    structlog.contextvars.bind_contextvars(user_id=user_id)
