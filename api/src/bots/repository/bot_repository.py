import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import desc, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Bot, utcnow

from ...errors import DuplicateBotNameError, StorageError
from ...storage import storage_errors

logger = logging.getLogger("api")


class BotRepository:
    """Keyed CRUD over bot records. Every mutation touches exactly one row."""

    async def create(self, db: AsyncSession, bot: Bot) -> Bot:
        async with storage_errors(db, "create bot"):
            db.add(bot)
            await self._commit_unique(db, bot.name)
            await db.refresh(bot)
        return bot

    async def get(self, db: AsyncSession, bot_id: UUID) -> Optional[Bot]:
        async with storage_errors(db, "load bot"):
            result = await db.execute(select(Bot).filter(Bot.id == bot_id))
            return result.scalars().first()

    async def find_by_owner_and_name(self, db: AsyncSession, owner_id: UUID, name: str) -> Optional[Bot]:
        async with storage_errors(db, "look up bot by name"):
            result = await db.execute(
                select(Bot).filter(Bot.owner_id == owner_id, Bot.name == name)
            )
            return result.scalars().first()

    async def list_by_owner(self, db: AsyncSession, owner_id: UUID) -> List[Bot]:
        """Newest first"""
        async with storage_errors(db, "list bots"):
            result = await db.execute(
                select(Bot).filter(Bot.owner_id == owner_id).order_by(desc(Bot.created_at))
            )
            return list(result.scalars().all())

    async def save(self, db: AsyncSession, bot: Bot) -> Bot:
        """Commit pending attribute changes on a loaded record"""
        async with storage_errors(db, "update bot"):
            await self._commit_unique(db, bot.name)
            await db.refresh(bot)
        return bot

    async def transition_status(self, db: AsyncSession, bot: Bot, expected: str, new: str) -> bool:
        """
        Conditional status write: only applies while the row still has the
        status that was read. Returns False when another writer got there first.
        """
        async with storage_errors(db, "update bot status"):
            result = await db.execute(
                update(Bot)
                .where(Bot.id == bot.id, Bot.status == expected)
                .values(status=new, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await db.rollback()
                logger.warning(f"⚠️ Status of bot {bot.id} changed concurrently (expected '{expected}')")
                return False
            await db.commit()
            await db.refresh(bot)
        return True

    async def update_performance_cache(
        self,
        db: AsyncSession,
        bot: Bot,
        total_deals: int,
        total_profit: float,
        last_deal_at: Optional[datetime],
    ) -> Bot:
        bot.total_deals = total_deals
        bot.total_profit = total_profit
        bot.last_deal_at = last_deal_at
        async with storage_errors(db, "update performance cache"):
            await db.commit()
            await db.refresh(bot)
        return bot

    async def delete(self, db: AsyncSession, bot: Bot) -> None:
        async with storage_errors(db, "delete bot"):
            await db.delete(bot)
            await db.commit()

    async def _commit_unique(self, db: AsyncSession, name: str) -> None:
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if not _is_name_conflict(e):
                logger.error(f"❌ Integrity error while saving bot '{name}': {e.orig}")
                raise StorageError("Bot record violates a database constraint", details=str(e.orig)) from e
            raise DuplicateBotNameError(f"A bot named '{name}' already exists") from e


def _is_name_conflict(error: IntegrityError) -> bool:
    # Postgres names the constraint, SQLite lists the columns
    message = str(error.orig)
    return "uq_bots_owner_name" in message or "bots.owner_id, bots.name" in message


# Create repository instance
bot_repository = BotRepository()
