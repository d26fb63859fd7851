import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import StorageError

logger = logging.getLogger("api")


@asynccontextmanager
async def storage_errors(db: AsyncSession, action: str):
    """Roll back and re-raise database failures as StorageError"""
    try:
        yield
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"❌ Database error while trying to {action}: {e}")
        raise StorageError(f"Failed to {action}") from e
