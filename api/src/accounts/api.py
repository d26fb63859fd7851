from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from ..dependencies import get_account_service
from .dto import ConnectExchangeDto, DisconnectExchangeDto
from .responses import (
    AccountDetailsResponse, ConnectExchangeResponse, ConnectionCheckResponse, ExchangeStatusResponse,
)
from .service import AccountService


router = APIRouter(prefix="/binance", tags=["binance"])

logger = logging.getLogger("api")


@router.post("/connect", response_model=ConnectExchangeResponse)
async def connect_binance(
    dto: ConnectExchangeDto,
    db: AsyncSession = Depends(get_db),
    service: AccountService = Depends(get_account_service),
):
    """Validate Binance credentials and link them to a 3Commas account"""
    return await service.connect_exchange(db, dto)


@router.get("/status", response_model=ExchangeStatusResponse)
async def get_binance_status(
    user_id: str = Query(..., min_length=1, description="Owner identifier"),
    verify: bool = Query(False, description="Re-validate the stored credentials against Binance"),
    db: AsyncSession = Depends(get_db),
    service: AccountService = Depends(get_account_service),
):
    """Get the exchange connection status of a user"""
    return await service.get_status(db, user_id, verify=verify)


@router.post("/disconnect")
async def disconnect_binance(
    dto: DisconnectExchangeDto,
    db: AsyncSession = Depends(get_db),
    service: AccountService = Depends(get_account_service),
):
    """Remove the stored exchange credentials"""
    await service.disconnect_exchange(db, dto.user_id)
    return {"success": True, "message": "Binance disconnected"}


@router.get("/accounts", response_model=List[dict])
async def list_three_commas_accounts(
    account_type: Optional[str] = Query("binance", description="Filter by 3Commas account type"),
    service: AccountService = Depends(get_account_service),
):
    """List the exchange accounts registered on 3Commas"""
    return await service.list_remote_accounts(account_type=account_type)


@router.get("/account/{account_id}", response_model=AccountDetailsResponse)
async def get_account_details(
    account_id: int,
    service: AccountService = Depends(get_account_service),
):
    """Get one 3Commas exchange account"""
    return await service.get_account_details(account_id)


@router.get("/test-3commas", response_model=ConnectionCheckResponse)
async def check_three_commas_connection(
    service: AccountService = Depends(get_account_service),
):
    """Check the 3Commas credentials by listing accounts and bots"""
    return await service.check_connection()
