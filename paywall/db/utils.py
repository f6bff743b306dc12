"""
Database utility functions and decorators.

Provides:
- Retry decorator for transient errors and write conflicts
- Model-to-dict helper for building schemas from ORM rows
"""

import asyncio
import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, DisconnectionError, InterfaceError, OperationalError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Define which exceptions are retryable
RETRYABLE_EXCEPTIONS = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    asyncio.TimeoutError,
    ConnectionRefusedError,
    ConnectionResetError,
)

# PostgreSQL serialization_failure and deadlock_detected
CONFLICT_SQLSTATES = frozenset({"40001", "40P01"})


def is_retryable(exc: BaseException) -> bool:
    """Return True for transient connection errors and transaction conflicts."""
    if isinstance(exc, RETRYABLE_EXCEPTIONS):
        return True
    if isinstance(exc, DBAPIError):
        sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
        return sqlstate in CONFLICT_SQLSTATES
    return False


def create_db_retry(
    max_attempts: int = 3,
    min_wait: float = 0.05,
    max_wait: float = 1,
):
    """
    Create a tenacity retry decorator for database operations.

    Args:
        max_attempts: Maximum number of retry attempts
        min_wait: Minimum wait time between retries (seconds)
        max_wait: Maximum wait time between retries (seconds)

    Returns:
        Configured retry decorator
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=0.1, min=min_wait, max=max_wait),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


# Default retry decorator for database operations
db_retry = create_db_retry()


def with_db_retry(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to add retry logic to async database functions.

    Usage:
        @with_db_retry
        async def my_db_operation(self):
            async with self._db.session() as session:
                ...

    Note: This decorator wraps the entire function, so the retry
    will re-execute the function (and its transaction) from the beginning.
    """
    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        @db_retry
        async def inner():
            return await func(*args, **kwargs)
        return await inner()

    return wrapper


def model_to_dict(model: Any, exclude_none: bool = False) -> dict:
    """
    Convert SQLAlchemy model to dictionary.

    Args:
        model: SQLAlchemy model instance
        exclude_none: If True, exclude keys with None values

    Returns:
        Dictionary representation of the model's columns
    """
    from sqlalchemy.inspection import inspect

    result = {}
    mapper = inspect(model.__class__)

    for column in mapper.columns:
        value = getattr(model, column.key)
        if exclude_none and value is None:
            continue
        result[column.key] = value

    return result
