"""Retry helpers for transient PostgreSQL conflicts.

Serialization failures (40001) and deadlocks (40P01) abort the whole
transaction; the caller must re-run its unit of work from the start.
"""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import DBAPIError

from src.pm_common.errors import StorageConflictError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

CONFLICT_SQLSTATES = frozenset({"40001", "40P01"})


def is_transient_conflict(exc: BaseException) -> bool:
    """True when a DBAPIError wraps a serialization failure or deadlock."""
    if not isinstance(exc, DBAPIError):
        return False
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in CONFLICT_SQLSTATES


def retry_on_conflict(
    max_attempts: int = 3, base_delay: float = 0.05, max_delay: float = 1.0
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator: re-run an async unit of work on transient conflicts.

    Non-conflict exceptions (including AppError rejections) propagate on the
    first attempt. Exhausted retries raise StorageConflictError.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except DBAPIError as exc:
                    if not is_transient_conflict(exc):
                        raise
                    if attempt == max_attempts:
                        logger.error(
                            "%s conflicted %d times, giving up", func.__name__, max_attempts
                        )
                        raise StorageConflictError(max_attempts) from exc
                    delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
                    logger.warning(
                        "%s attempt %d/%d hit a write conflict, retrying in %.3fs",
                        func.__name__,
                        attempt,
                        max_attempts,
                        delay,
                    )
                    await asyncio.sleep(delay)
            raise StorageConflictError(max_attempts)

        return wrapper

    return decorator
