import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings
from src.kb_common.errors import PersistenceError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Shared declarative base for the seller, customer, product and ledger tables."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=10,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one AsyncSession per request, closed afterwards."""
    async with async_session_factory() as session:
        yield session


@asynccontextmanager
async def transactional(db: AsyncSession, operation: str) -> AsyncIterator[None]:
    """Commit the block's writes together, or roll all of them back.

    Driver/storage errors are logged and re-raised as PersistenceError;
    anything else (validation AppErrors included) is re-raised unchanged.
    """
    try:
        yield
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("%s rolled back after storage failure: %s", operation, exc)
        raise PersistenceError(operation) from exc
    except Exception:
        await db.rollback()
        raise
