"""Request-scoped dependencies for the API routes."""

from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable, TypeVar

from sqlalchemy.exc import OperationalError

from sewflow.core.config import settings
from sewflow.core.db import get_sessionmaker
from sewflow.core.db_errors import raise_on_lock_conflict
from sewflow.core.db_retry import with_db_retry
from sewflow.repositories.base import UnitOfWork
from sewflow.repositories.memory import MemoryStore, MemoryUnitOfWork
from sewflow.repositories.sql import SqlUnitOfWork

T = TypeVar("T")

memory_store = MemoryStore()


async def get_uow() -> AsyncIterator[UnitOfWork]:
    """Yield the unit of work for the configured storage backend."""

    if settings.STORAGE_BACKEND == "memory":
        yield MemoryUnitOfWork(memory_store)
        return
    async with get_sessionmaker()() as session:
        yield SqlUnitOfWork(session)


async def run_in_unit(uow: UnitOfWork, operation: Callable[[], Awaitable[T]]) -> T:
    """Run a write operation and commit it, retrying transient lock failures."""

    async def _once() -> T:
        try:
            result = await operation()
        except Exception:
            await uow.rollback()
            raise
        await uow.commit()
        return result

    try:
        return await with_db_retry(uow, _once)
    except OperationalError as exc:
        raise_on_lock_conflict(exc)
        raise
