from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class BotResponse(BaseModel):
    """Response schema for a bot record"""
    id: UUID
    owner_id: UUID
    three_commas_bot_id: Optional[int]
    exchange_id: int

    # Configuration
    name: str
    pair: str
    strategy: str
    bot_type: str
    profit_currency: str
    base_order_size: float
    start_order_type: str
    take_profit_type: str
    target_profit_percent: float
    safety_order_volume: float
    max_safety_orders: int
    safety_order_step_percentage: float
    stop_loss_percentage: float
    cooldown: int
    note: str
    config_version: int

    status: str

    # Performance cache
    total_deals: int
    total_profit: float
    last_deal_at: Optional[datetime]
    total_value: float

    # Timestamps
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
