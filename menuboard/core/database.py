"""Async database engine and session factory."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from menuboard.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# SQLite (local dev) does not accept pool sizing arguments.
_pool_kwargs = (
    {} if settings.database_url.startswith("sqlite") else {"pool_size": 20, "max_overflow": 10}
)

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
    **_pool_kwargs,
)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields one async DB session per request."""
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    """Create missing tables for the registered models."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database schema ensured for %d tables", len(SQLModel.metadata.tables))
