"""
Bot lifecycle orchestration.

The local record answers "did we already commit", 3Commas answers "is it
actually running". Every mutation except delete calls 3Commas first and only
writes locally after the remote call succeeded, so a local record never claims
a state the platform did not reach. Delete inverts this: the local record is
always removed, the remote delete is best effort.

Sequences of "load, remote call, local write" on the same bot are serialized
by a per-bot lock; status writes are also conditional on the status that was
read, which protects against writers in other processes.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import BOT_NAME_MAX_LENGTH, Bot, User

from ...accounts.repository import UserRepository, user_repository
from ...errors import (
    AuthorizationError, DuplicateBotNameError, NotFoundError, PreconditionError, RemoteError,
    RemoteUnreachable, StorageError, ValidationError,
)
from ...settings import Settings
from ...three_commas.models import RemoteBotRequest
from ..dto import BotConfig, CreateBotDto, DuplicateBotDto, UpdateBotDto
from ..repository import BotRepository, bot_repository
from ..responses import (
    BotDetailsResponse, BotPerformanceResponse, BotResponse, BotSummary, BotSummaryResponse, DealResponse,
)
from .locks import BotLockRegistry
from .mapping import apply_config, build_remote_bot_request, config_from_bot
from .performance import aggregate_performance, last_deal_at

logger = logging.getLogger("api")

ACCESS_DENIED_MESSAGE = "Bot not found or access denied"
PERFORMANCE_DEAL_LIMIT = 1000
COPY_SUFFIX = " (copy)"


def default_copy_name(name: str) -> str:
    """Source name plus " (copy)", shortened so the result still fits the name column"""
    return name[:BOT_NAME_MAX_LENGTH - len(COPY_SUFFIX)] + COPY_SUFFIX


class BotService:
    """Service class for bot lifecycle operations"""

    def __init__(
        self,
        client,
        settings: Settings,
        locks: Optional[BotLockRegistry] = None,
        bots: BotRepository = bot_repository,
        users: UserRepository = user_repository,
    ):
        self.client = client
        self.locks = locks or BotLockRegistry()
        self.bots = bots
        self.users = users
        self.retry_attempts = settings.remote_retry_attempts
        self.retry_backoff_seconds = settings.remote_retry_backoff_seconds

    # =================== CREATE / DUPLICATE ===================

    async def create_bot(self, db: AsyncSession, dto: CreateBotDto) -> BotResponse:
        """Create the bot on 3Commas, then persist the local mirror as running"""
        owner = await self._resolve_owner(db, dto.user_id)
        if owner.three_commas_account_id is None:
            raise PreconditionError("Exchange account is not connected to 3Commas")

        config = BotConfig.model_validate(dto.model_dump(exclude={"user_id", "bot_name"}))

        async with self.locks.hold(("name", owner.id, dto.bot_name)):
            await self._ensure_name_free(db, owner.id, dto.bot_name)

            request = build_remote_bot_request(dto.bot_name, owner.three_commas_account_id, config, active=True)
            logger.info(f"🔍 Creating bot '{dto.bot_name}' on 3Commas for user {dto.user_id}")
            remote = await self._call_remote("create bot", lambda: self.client.create_bot(request), retry=False)
            logger.info(f"✅ 3Commas bot created: {remote.id}")

            bot = Bot(
                owner_id=owner.id,
                exchange_id=owner.three_commas_account_id,
                name=dto.bot_name,
                three_commas_bot_id=remote.id,
                status="running",
                config_version=1,
            )
            apply_config(bot, config)
            bot = await self._persist_new(db, bot)

        logger.info(f"✅ Bot created successfully: {bot.id}")
        return BotResponse.model_validate(bot)

    async def duplicate_bot(self, db: AsyncSession, bot_id: UUID, dto: DuplicateBotDto) -> BotResponse:
        """Copy a bot's configuration into a new, paused bot"""
        source = await self._load_owned(db, bot_id, dto.user_id)
        new_name = dto.new_name or default_copy_name(source.name)
        config = config_from_bot(source)

        async with self.locks.hold(("name", source.owner_id, new_name)):
            await self._ensure_name_free(db, source.owner_id, new_name)

            # Duplicates never start trading on their own
            request = build_remote_bot_request(new_name, source.exchange_id, config, active=False)
            remote = await self._call_remote("duplicate bot", lambda: self.client.create_bot(request), retry=False)

            bot = Bot(
                owner_id=source.owner_id,
                exchange_id=source.exchange_id,
                name=new_name,
                three_commas_bot_id=remote.id,
                status="paused",
                config_version=source.config_version + 1,
            )
            apply_config(bot, config)
            bot = await self._persist_new(db, bot)

        logger.info(f"✅ Bot {source.id} duplicated as {bot.id} (config v{bot.config_version})")
        return BotResponse.model_validate(bot)

    # =================== LIFECYCLE ===================

    async def pause_bot(self, db: AsyncSession, bot_id: UUID, user_id: str) -> BotResponse:
        async with self.locks.hold(bot_id):
            bot = await self._load_owned(db, bot_id, user_id)
            if bot.status != "running":
                raise PreconditionError("Bot is not currently running")
            remote_id = self._require_remote_id(bot)

            await self._call_remote("pause bot", lambda: self.client.pause_bot(remote_id), retry=True)
            logger.info(f"✅ Bot paused in 3Commas successfully: {remote_id}")
            return await self._transition(db, bot, "paused")

    async def start_bot(self, db: AsyncSession, bot_id: UUID, user_id: str) -> BotResponse:
        async with self.locks.hold(bot_id):
            bot = await self._load_owned(db, bot_id, user_id)
            if bot.status not in ("paused", "stopped"):
                raise PreconditionError("Bot must be paused or stopped to start")
            remote_id = self._require_remote_id(bot)

            # start_new_deal is not idempotent, a retry could open a second deal
            await self._call_remote("start bot", lambda: self.client.start_new_deal(remote_id), retry=False)
            logger.info(f"✅ Bot started in 3Commas successfully: {remote_id}")
            return await self._transition(db, bot, "running")

    async def emergency_stop_bot(self, db: AsyncSession, bot_id: UUID, user_id: str) -> BotResponse:
        async with self.locks.hold(bot_id):
            bot = await self._load_owned(db, bot_id, user_id)
            remote_id = self._require_remote_id(bot)

            await self._call_remote("panic sell", lambda: self.client.panic_sell(remote_id), retry=False)
            logger.info(f"🛑 Bot emergency stopped in 3Commas: {remote_id}")
            return await self._transition(db, bot, "stopped")

    async def update_bot(self, db: AsyncSession, bot_id: UUID, dto: UpdateBotDto) -> BotResponse:
        """All-or-nothing: the local record changes only after 3Commas accepted the update"""
        async with self.locks.hold(bot_id):
            bot = await self._load_owned(db, bot_id, dto.user_id)
            self._require_remote_id(bot)

            try:
                config = BotConfig.model_validate(
                    {**config_from_bot(bot).model_dump(), **dto.config_changes()}
                )
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid bot configuration",
                    details=e.errors(include_url=False, include_context=False),
                ) from e

            new_name = dto.bot_name or bot.name
            if new_name == bot.name:
                bot = await self._apply_update(db, bot, new_name, config)
            else:
                # Same name lock as create/duplicate, so a rename cannot race a create
                async with self.locks.hold(("name", bot.owner_id, new_name)):
                    await self._ensure_name_free(db, bot.owner_id, new_name)
                    bot = await self._apply_update(db, bot, new_name, config)

        logger.info(f"✅ Bot updated successfully: {bot.id}")
        return BotResponse.model_validate(bot)

    async def delete_bot(self, db: AsyncSession, bot_id: UUID, user_id: str) -> None:
        """Stop tracking the bot. A 3Commas outage never blocks the local deletion."""
        async with self.locks.hold(bot_id):
            bot = await self._load_owned(db, bot_id, user_id)

            if bot.three_commas_bot_id is not None:
                remote_id = bot.three_commas_bot_id
                try:
                    await self._call_remote("delete bot", lambda: self.client.delete_bot(remote_id), retry=True)
                    logger.info(f"✅ Bot deleted from 3Commas successfully: {remote_id}")
                except RemoteError as e:
                    logger.error(f"❌ Failed to delete bot {remote_id} from 3Commas, continuing locally: {e.details}")

            await self.bots.delete(db, bot)
        logger.info(f"🗑️ Bot deleted: {bot_id}")

    # =================== READS ===================

    async def get_bot_details(self, db: AsyncSession, bot_id: UUID, user_id: str) -> BotDetailsResponse:
        bot = await self._load_owned(db, bot_id, user_id)

        remote = None
        if bot.three_commas_bot_id is not None:
            remote_id = bot.three_commas_bot_id
            try:
                remote_bot = await self._call_remote("get bot", lambda: self.client.get_bot(remote_id), retry=True)
                remote = remote_bot.model_dump()
            except RemoteError as e:
                logger.warning(f"⚠️ Failed to get 3Commas data for bot {remote_id}: {e.message}")

        return BotDetailsResponse(
            bot=BotResponse.model_validate(bot),
            remote=remote,
            has_remote_data=remote is not None,
        )

    async def list_user_bots(self, db: AsyncSession, user_id: str) -> List[BotResponse]:
        owner = await self._resolve_owner(db, user_id)
        bots = await self.bots.list_by_owner(db, owner.id)
        return [BotResponse.model_validate(bot) for bot in bots]

    async def get_summary(self, db: AsyncSession, user_id: str) -> BotSummaryResponse:
        owner = await self._resolve_owner(db, user_id)
        bots = await self.bots.list_by_owner(db, owner.id)
        if not bots:
            return BotSummaryResponse(summary=BotSummary(), top_bots=[], recent_bots=[])

        total_profit = sum(bot.total_profit or 0 for bot in bots)
        summary = BotSummary(
            total_bots=len(bots),
            running_bots=sum(1 for bot in bots if bot.status == "running"),
            paused_bots=sum(1 for bot in bots if bot.status == "paused"),
            stopped_bots=sum(1 for bot in bots if bot.status == "stopped"),
            error_bots=sum(1 for bot in bots if bot.status == "error"),
            total_value=sum(bot.total_value for bot in bots),
            total_profit=total_profit,
            average_profit=total_profit / len(bots),
        )
        top_bots = sorted(
            (bot for bot in bots if (bot.total_profit or 0) > 0),
            key=lambda bot: bot.total_profit,
            reverse=True,
        )[:5]
        recent_bots = sorted(bots, key=lambda bot: bot.updated_at, reverse=True)[:10]

        return BotSummaryResponse(
            summary=summary,
            top_bots=[BotResponse.model_validate(bot) for bot in top_bots],
            recent_bots=[BotResponse.model_validate(bot) for bot in recent_bots],
        )

    async def get_performance(self, db: AsyncSession, bot_id: UUID, user_id: str) -> BotPerformanceResponse:
        bot = await self._load_owned(db, bot_id, user_id)
        remote_id = self._require_remote_id(bot)

        deals = await self._call_remote(
            "get deals",
            lambda: self.client.get_deals(remote_id, limit=PERFORMANCE_DEAL_LIMIT, offset=0),
            retry=True,
        )
        evaluated_at = datetime.now(timezone.utc)
        performance = aggregate_performance(deals, now=evaluated_at)

        await self.bots.update_performance_cache(
            db, bot, performance.total_deals, performance.total_profit, last_deal_at(deals)
        )
        return BotPerformanceResponse(
            bot_id=bot.id,
            three_commas_bot_id=remote_id,
            performance=performance,
            evaluated_at=evaluated_at,
        )

    async def get_deals(
        self, db: AsyncSession, bot_id: UUID, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[DealResponse]:
        bot = await self._load_owned(db, bot_id, user_id)
        remote_id = self._require_remote_id(bot)

        deals = await self._call_remote(
            "get deals", lambda: self.client.get_deals(remote_id, limit=limit, offset=offset), retry=True
        )
        return [
            DealResponse(
                id=deal.id,
                bot_id=deal.bot_id,
                status=deal.status,
                created_at=deal.created_at,
                closed_at=deal.closed_at,
                profit=deal.profit,
                profit_percent=deal.profit_percent,
            )
            for deal in deals
        ]

    async def list_remote_bots(self, db: AsyncSession, user_id: str) -> List[dict]:
        owner = await self._resolve_owner(db, user_id)
        if owner.three_commas_account_id is None:
            raise PreconditionError("Exchange account is not connected to 3Commas")
        account_id = owner.three_commas_account_id

        remote_bots = await self._call_remote(
            "list bots", lambda: self.client.list_bots(account_id=account_id), retry=True
        )
        return [remote_bot.model_dump() for remote_bot in remote_bots]

    # =================== HELPERS ===================

    async def _call_remote(self, operation: str, call: Callable[[], Awaitable[Any]], retry: bool) -> Any:
        """
        Run one remote call. Only RemoteUnreachable is retried, with exponential
        backoff, and only when the caller marked the call as idempotent.
        """
        attempts = 1 + (self.retry_attempts if retry else 0)
        for attempt in range(1, attempts + 1):
            try:
                return await call()
            except RemoteUnreachable as e:
                if attempt >= attempts:
                    logger.error(f"❌ 3Commas unreachable during '{operation}' after {attempt} attempt(s): {e.details}")
                    raise
                delay = self.retry_backoff_seconds * (2 ** (attempt - 1))
                logger.warning(f"⚠️ 3Commas unreachable during '{operation}', retrying in {delay:.2f}s")
                await asyncio.sleep(delay)

    async def _resolve_owner(self, db: AsyncSession, user_id: str) -> User:
        user = await self.users.get_by_external_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _load_owned(self, db: AsyncSession, bot_id: UUID, user_id: str) -> Bot:
        bot = await self.bots.get(db, bot_id)
        if bot is None:
            raise NotFoundError(ACCESS_DENIED_MESSAGE)
        user = await self.users.get_by_external_id(db, user_id)
        if user is None or bot.owner_id != user.id:
            logger.warning(f"🚫 User {user_id} attempted to access bot {bot_id}")
            raise AuthorizationError(ACCESS_DENIED_MESSAGE)
        return bot

    @staticmethod
    def _require_remote_id(bot: Bot) -> int:
        if bot.three_commas_bot_id is None:
            raise PreconditionError("Bot not linked to 3Commas")
        return bot.three_commas_bot_id

    async def _ensure_name_free(self, db: AsyncSession, owner_id: UUID, name: str) -> None:
        if await self.bots.find_by_owner_and_name(db, owner_id, name) is not None:
            raise DuplicateBotNameError(f"A bot named '{name}' already exists")

    async def _transition(self, db: AsyncSession, bot: Bot, new_status: str) -> BotResponse:
        if not await self.bots.transition_status(db, bot, expected=bot.status, new=new_status):
            raise PreconditionError("Bot status changed while the request was in flight")
        return BotResponse.model_validate(bot)

    async def _persist_new(self, db: AsyncSession, bot: Bot) -> Bot:
        """Insert a record for a bot that already exists on 3Commas, undoing the remote side on failure"""
        try:
            return await self.bots.create(db, bot)
        except (DuplicateBotNameError, StorageError):
            await self._discard_remote_bot(bot.three_commas_bot_id)
            raise

    async def _apply_update(self, db: AsyncSession, bot: Bot, new_name: str, config: BotConfig) -> Bot:
        """Update 3Commas, then the local record; restore the 3Commas side if the local write fails"""
        remote_id = bot.three_commas_bot_id
        active = bot.status == "running"
        request = build_remote_bot_request(new_name, bot.exchange_id, config, active=active)
        # Captured before any write: a failed commit expires the loaded attributes
        previous = build_remote_bot_request(bot.name, bot.exchange_id, config_from_bot(bot), active=active)

        await self._call_remote("update bot", lambda: self.client.update_bot(remote_id, request), retry=True)

        apply_config(bot, config)
        bot.name = new_name
        try:
            return await self.bots.save(db, bot)
        except (DuplicateBotNameError, StorageError):
            await self._restore_remote_bot(remote_id, previous)
            raise

    async def _restore_remote_bot(self, remote_id: int, previous: RemoteBotRequest) -> None:
        try:
            await self._call_remote("restore bot", lambda: self.client.update_bot(remote_id, previous), retry=True)
            logger.warning(f"⚠️ Local update failed, restored 3Commas bot {remote_id} to '{previous.name}'")
        except RemoteError as e:
            logger.error(f"❌ Local update failed and 3Commas bot {remote_id} could not be restored: {e.details}")

    async def _discard_remote_bot(self, remote_id: int) -> None:
        try:
            await self._call_remote("discard bot", lambda: self.client.delete_bot(remote_id), retry=True)
            logger.warning(f"⚠️ Local insert failed, removed 3Commas bot {remote_id}")
        except RemoteError as e:
            logger.error(f"❌ Local insert failed and 3Commas bot {remote_id} could not be removed: {e.details}")
