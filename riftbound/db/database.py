"""
Database engine and session management.

Provides async SQLAlchemy engine and session factory for FastAPI.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from riftbound.config import settings
from riftbound.models.db import Base
from riftbound.models.failure import RecordStoreError, classify_store_error

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    The session commits when the request handler finishes. A record store
    failure, during the request or at commit, rolls the whole request back;
    commit failures are re-raised as RecordStoreError.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except RecordStoreError as e:
            logger.warning("Rolling back request after store failure: %s", e.kind.value)
            await session.rollback()
            raise
        except SQLAlchemyError as e:
            logger.warning("Commit failed: %s", type(e).__name__)
            await session.rollback()
            raise classify_store_error(e) from e


async def init_db() -> None:
    """
    Initialize database tables.

    Should be called once at application startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

