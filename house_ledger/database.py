"""Database session and connection"""

import functools
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.orm import declarative_base

from house_ledger.config import get_settings
from house_ledger.core.exceptions import StorageError

logger = logging.getLogger(__name__)

settings = get_settings()

engine_options = {"echo": settings.debug}
if settings.database_url.startswith("postgresql"):
    engine_options.update(pool_size=20, max_overflow=10, pool_pre_ping=True)

# Create async engine
engine = create_async_engine(settings.database_url, **engine_options)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database session.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def write_transaction(db: AsyncSession, action: str) -> AsyncGenerator[AsyncSession, None]:
    """
    Run a block of writes as one commit.

    Any error rolls the whole block back; database errors surface as
    StorageError.

    Args:
        db: Database session
        action: Short description used in logs and error messages
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Rolled back %s: %s", action, e)
        raise StorageError(f"Failed to {action}") from e
    except Exception:
        await db.rollback()
        raise


def storage_errors(action: str):
    """Translate database errors raised by a read into StorageError."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error("Failed to %s: %s", action, e)
                raise StorageError(f"Failed to {action}") from e

        return wrapper

    return decorator
