"""
Operation Tracing
Structured timing logs around pipeline stages.
"""

import time
from contextlib import contextmanager
from typing import Any, Iterator

from .logging_config import get_logger

logger = get_logger(__name__)

SLOW_OPERATION_SECONDS = 1.0


@contextmanager
def trace_operation(operation: str, **kwargs: Any) -> Iterator[None]:
    """
    Context manager for tracing operations with structured logging.

    Args:
        operation: Name of the operation
        **kwargs: Additional context to log
    """
    start = time.perf_counter()
    logger.debug("operation_start", operation=operation, **kwargs)

    try:
        yield
    except Exception as e:
        duration = time.perf_counter() - start
        logger.error(
            "operation_error",
            operation=operation,
            error=str(e),
            duration_ms=duration * 1000,
            **kwargs,
        )
        raise
    else:
        duration = time.perf_counter() - start
        if duration > SLOW_OPERATION_SECONDS:
            logger.warning("operation_slow", operation=operation, duration_ms=duration * 1000, **kwargs)
        else:
            logger.debug("operation_end", operation=operation, duration_ms=duration * 1000, **kwargs)
