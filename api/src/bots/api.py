from typing import List
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from ..dependencies import get_bot_service
from .dto import BotActionDto, CreateBotDto, DuplicateBotDto, UpdateBotDto
from .responses import (
    BotActionResponse, BotDetailsResponse, BotListResponse, BotPerformanceResponse, BotSummaryResponse,
    DealResponse,
)
from .service import BotService


router = APIRouter(prefix="/bots", tags=["bots"])

# Set up logger for API debugging
logger = logging.getLogger("api")


# Lifecycle Endpoints
@router.post("/create", response_model=BotActionResponse, status_code=201)
async def create_bot(
    dto: CreateBotDto,
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Create a bot on 3Commas and store its local mirror"""
    logger.info(f"✅ Bot validation passed - creating '{dto.bot_name}'")
    bot = await service.create_bot(db, dto)
    return BotActionResponse(message="Bot created successfully", data=bot)


@router.post("/pause/{bot_id}", response_model=BotActionResponse)
async def pause_bot(
    bot_id: UUID,
    dto: BotActionDto,
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Pause a running bot"""
    bot = await service.pause_bot(db, bot_id, dto.user_id)
    return BotActionResponse(message="Bot paused successfully", data=bot)


@router.post("/start/{bot_id}", response_model=BotActionResponse)
async def start_bot(
    bot_id: UUID,
    dto: BotActionDto,
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Start a paused or stopped bot"""
    bot = await service.start_bot(db, bot_id, dto.user_id)
    return BotActionResponse(message="Bot started successfully", data=bot)


@router.post("/emergency-stop/{bot_id}", response_model=BotActionResponse)
async def emergency_stop_bot(
    bot_id: UUID,
    dto: BotActionDto,
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Panic-sell all open deals and stop the bot"""
    bot = await service.emergency_stop_bot(db, bot_id, dto.user_id)
    return BotActionResponse(message="Bot emergency stopped successfully", data=bot)


@router.patch("/{bot_id}", response_model=BotActionResponse)
async def update_bot(
    bot_id: UUID,
    dto: UpdateBotDto,
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Update bot configuration on 3Commas and locally"""
    bot = await service.update_bot(db, bot_id, dto)
    return BotActionResponse(message="Bot updated successfully", data=bot)


@router.delete("/delete/{bot_id}", response_model=BotActionResponse)
async def delete_bot(
    bot_id: UUID,
    dto: BotActionDto,
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Delete a bot (3Commas deletion is best effort)"""
    await service.delete_bot(db, bot_id, dto.user_id)
    return BotActionResponse(message="Bot deleted successfully")


@router.post("/duplicate/{bot_id}", response_model=BotActionResponse, status_code=201)
async def duplicate_bot(
    bot_id: UUID,
    dto: DuplicateBotDto,
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Duplicate a bot; the copy starts paused"""
    bot = await service.duplicate_bot(db, bot_id, dto)
    return BotActionResponse(message="Bot duplicated successfully", data=bot)


# Read Endpoints
@router.get("/user/{user_id}", response_model=BotListResponse)
async def get_bots_by_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Get all bots of a user, newest first"""
    bots = await service.list_user_bots(db, user_id)
    return BotListResponse(total=len(bots), data=bots)


@router.get("/summary", response_model=BotSummaryResponse)
async def get_bot_summary(
    user_id: str = Query(..., min_length=1, description="Owner identifier"),
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Dashboard summary of a user's bots"""
    return await service.get_summary(db, user_id)


@router.get("/remote", response_model=List[dict])
async def list_remote_bots(
    user_id: str = Query(..., min_length=1, description="Owner identifier"),
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """List the bots 3Commas holds for the user's linked account"""
    return await service.list_remote_bots(db, user_id)


@router.get("/{bot_id}", response_model=BotDetailsResponse)
async def get_bot_details(
    bot_id: UUID,
    user_id: str = Query(..., min_length=1, description="Owner identifier"),
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Get a bot with its live 3Commas data when available"""
    return await service.get_bot_details(db, bot_id, user_id)


@router.get("/{bot_id}/performance", response_model=BotPerformanceResponse)
async def get_bot_performance(
    bot_id: UUID,
    user_id: str = Query(..., min_length=1, description="Owner identifier"),
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Aggregate performance from the bot's 3Commas deals"""
    return await service.get_performance(db, bot_id, user_id)


@router.get("/{bot_id}/deals", response_model=List[DealResponse])
async def get_bot_deals(
    bot_id: UUID,
    user_id: str = Query(..., min_length=1, description="Owner identifier"),
    limit: int = Query(50, ge=1, le=1000, description="Maximum number of deals"),
    offset: int = Query(0, ge=0, description="Number of deals to skip"),
    db: AsyncSession = Depends(get_db),
    service: BotService = Depends(get_bot_service),
):
    """Get the bot's deals from 3Commas"""
    return await service.get_deals(db, bot_id, user_id, limit=limit, offset=offset)
