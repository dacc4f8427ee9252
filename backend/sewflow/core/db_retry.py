"""Retry a unit of work when the database reports a deadlock or lock timeout."""

from __future__ import annotations

import random
from typing import Awaitable, Callable, Protocol, TypeVar

import anyio
from loguru import logger
from sqlalchemy.exc import DBAPIError

from sewflow.core.config import settings
from sewflow.core.db_errors import (
    DEADLOCK,
    LOCK_WAIT_TIMEOUT,
    NOWAIT_REFUSED,
    describe_driver_error,
)

T = TypeVar("T")

RETRIABLE_CODES = {LOCK_WAIT_TIMEOUT, DEADLOCK, NOWAIT_REFUSED}
RETRIABLE_SQLSTATES = {"40001", "40P01"}
RETRIABLE_MESSAGES = ("deadlock", "lock wait timeout", "database is locked")


class SupportsRollback(Protocol):
    async def rollback(self) -> None: ...


def is_transient(exc: DBAPIError) -> bool:
    error = describe_driver_error(exc)
    if error.code == NOWAIT_REFUSED and settings.DB_NOWAIT_LOCKS:
        # NOWAIT exists to fail fast; the caller gets a 409 instead
        return False
    if error.code in RETRIABLE_CODES or error.sqlstate in RETRIABLE_SQLSTATES:
        return True
    return any(marker in error.message for marker in RETRIABLE_MESSAGES)


def backoff_delay(attempt: int, base_delay: float, jitter: float) -> float:
    return base_delay * (2 ** (attempt - 1)) + random.uniform(0, jitter)


async def with_db_retry(
    unit: SupportsRollback,
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int | None = None,
    base_delay: float | None = None,
    jitter: float | None = None,
) -> T:
    """Await ``operation``, rolling ``unit`` back and retrying on transient lock errors.

    ``unit`` is an ``AsyncSession`` or a unit of work.  Non-transient errors
    propagate on the first attempt; the last transient one propagates once
    ``attempts`` is exhausted.
    """

    attempts = attempts or settings.DB_RETRY_ATTEMPTS
    base_delay = base_delay if base_delay is not None else settings.DB_RETRY_BASE_DELAY
    jitter = jitter if jitter is not None else settings.DB_RETRY_JITTER

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except DBAPIError as exc:
            if not is_transient(exc):
                raise
            await unit.rollback()
            if attempt == attempts:
                logger.bind(attempts=attempts, error=str(exc)).error("db_retry_exhausted")
                raise
            delay = backoff_delay(attempt, base_delay, jitter)
            logger.bind(attempt=attempt, max_attempts=attempts, sleep=delay, error=str(exc)).warning(
                "db_retry_deadlock"
            )
            await anyio.sleep(delay)
    raise RuntimeError("with_db_retry needs at least one attempt")
