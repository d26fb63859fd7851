from typing import Literal, Optional

from pydantic import BaseModel, Field


class UpdateBotDto(BaseModel):
    """DTO for updating a bot. Only submitted fields are changed."""

    user_id: str = Field(..., min_length=1, max_length=255)
    bot_name: Optional[str] = Field(None, min_length=1, max_length=100)

    pair: Optional[str] = Field(None, min_length=1, max_length=30)
    direction: Optional[Literal["long", "short"]] = None
    bot_type: Optional[Literal["single", "multi"]] = None
    profit_currency: Optional[Literal["quote", "base"]] = None
    base_order_size: Optional[float] = Field(None, gt=0)
    start_order_type: Optional[Literal["market", "limit"]] = None
    take_profit_type: Optional[Literal["total", "step"]] = None
    target_profit_percent: Optional[float] = Field(None, gt=0, le=100)
    safety_order_volume: Optional[float] = Field(None, gt=0)
    max_safety_orders: Optional[int] = Field(None, ge=1, le=25)
    safety_order_step_percentage: Optional[float] = Field(None, ge=0.1, le=50.0)
    stop_loss_percentage: Optional[float] = Field(None, ge=0, le=100)
    cooldown: Optional[int] = Field(None, ge=0)
    note: Optional[str] = Field(None, max_length=1000)

    def config_changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"user_id", "bot_name"})
