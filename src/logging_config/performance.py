"""Performance Logging.

Timing for platform calls that may suspend for a long time (permission
dialog, push-token service, store round trips).
"""

import asyncio
import functools
import logging
import time
from typing import Any, Callable, Optional

from src.logging_config.setup import get_active_config


def _log_duration(
    _logger: logging.Logger,
    name: str,
    duration_ms: float,
    threshold_ms: Optional[float],
    failed: Optional[BaseException] = None,
) -> None:
    if threshold_ms is None:
        threshold_ms = get_active_config().slow_threshold_ms
    extra = {"duration_ms": round(duration_ms, 2)}
    if failed is not None:
        _logger.error(f"{name} failed after {duration_ms:.1f}ms: {type(failed).__name__}", extra=extra)
    elif duration_ms >= threshold_ms:
        _logger.warning(f"Slow operation: {name} took {duration_ms:.1f}ms", extra=extra)
    else:
        _logger.debug(f"{name} completed in {duration_ms:.1f}ms", extra=extra)


def log_performance(
    threshold_ms: Optional[float] = None,
    logger_name: Optional[str] = None,
) -> Callable:
    """Decorator that logs execution time.

    Calls log at DEBUG, slow calls at WARNING and failures at ERROR
    (the exception is re-raised). Without ``threshold_ms`` the slow
    threshold of the active logging configuration applies.

    Example:
        @log_performance(threshold_ms=500)
        async def request_permission(self):
            ...
    """

    def decorator(func: Callable) -> Callable:
        _logger = logging.getLogger(logger_name or func.__module__)
        name = func.__qualname__

        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                start = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    _log_duration(_logger, name, (time.perf_counter() - start) * 1000, threshold_ms, exc)
                    raise
                _log_duration(_logger, name, (time.perf_counter() - start) * 1000, threshold_ms)
                return result
            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                _log_duration(_logger, name, (time.perf_counter() - start) * 1000, threshold_ms, exc)
                raise
            _log_duration(_logger, name, (time.perf_counter() - start) * 1000, threshold_ms)
            return result
        return sync_wrapper

    return decorator
