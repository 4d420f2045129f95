"""Async engine and request-scoped sessions for the booking database."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from aircargo.config.settings import settings
from aircargo.models import Base

logger = logging.getLogger(__name__)


def _engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.debug, "pool_pre_ping": True}
    if settings.database.serverless:
        options["poolclass"] = NullPool
    return options


engine: AsyncEngine = create_async_engine(settings.database.url, **_engine_options())

# Objects stay readable after commit; stores map them to domain models right away.
SessionFactory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    async with SessionFactory() as session:
        yield session


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""

    async with session_scope() as session:
        yield session


async def init_models() -> None:
    """Create the flights, bookings and booking_events tables when missing."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database schema ready at %s", engine.url.render_as_string(hide_password=True))


async def dispose_engine() -> None:
    await engine.dispose()
