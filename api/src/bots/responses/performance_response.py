from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from .bot_response import BotResponse


class PerformanceSummary(BaseModel):
    total_deals: int
    completed_deals: int
    active_deals: int
    total_profit: float
    total_profit_percent: float
    average_profit: float
    win_rate: float
    best_deal: Optional[float]
    worst_deal: Optional[float]
    average_deal_duration_ms: float


class BotPerformanceResponse(BaseModel):
    bot_id: UUID
    three_commas_bot_id: int
    performance: PerformanceSummary
    evaluated_at: datetime


class DealResponse(BaseModel):
    id: int
    bot_id: Optional[int]
    status: Optional[str]
    created_at: datetime
    closed_at: Optional[datetime]
    profit: float
    profit_percent: float


class BotSummary(BaseModel):
    total_bots: int = 0
    running_bots: int = 0
    paused_bots: int = 0
    stopped_bots: int = 0
    error_bots: int = 0
    total_value: float = 0.0
    total_profit: float = 0.0
    average_profit: float = 0.0


class BotSummaryResponse(BaseModel):
    summary: BotSummary
    top_bots: List[BotResponse]
    recent_bots: List[BotResponse]
