"""Async database engine and session helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from sewflow.core.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"pool_pre_ping": True, "echo": settings.DEBUG}
    if make_url(url).get_backend_name() == "sqlite":
        return options
    options.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )
    return options


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Create the process-wide engine on first use."""

    url = settings.DATABASE_URL
    return create_async_engine(url, **_engine_options(url))


@lru_cache(maxsize=1)
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=get_engine(), expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async database session."""

    async with get_sessionmaker()() as session:
        yield session
