"""
Structured Logging
Structlog rendered through the ``uigate`` stdlib logger, configured from Settings.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from pythonjsonlogger import jsonlogger

from .config import Settings, get_settings

PACKAGE_LOGGER = "uigate"

_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def configure_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """
    Configure structured logging for the pipeline.

    Only the package logger is touched, so embedding applications keep their
    own root handlers. Calling again replaces the previous handler.

    Args:
        settings: Source of ``log_level`` and ``json_logs``

    Returns:
        The configured package logger
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    if settings.json_logs:
        handler.setFormatter(jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)

    renderer = structlog.processors.JSONRenderer() if settings.json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[*_PROCESSORS, renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # reconfiguration must reach loggers created at import time
        cache_logger_on_first_use=False,
    )
    return package_logger


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class LogContext:
    """Bind request context to every log line in scope; outer bindings come back on exit."""

    def __init__(self, **kwargs: Any):
        self.context = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._tokens = dict(structlog.contextvars.bind_contextvars(**self.context))
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
