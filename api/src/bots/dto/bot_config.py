from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class BotConfig(BaseModel):
    """Trading configuration shared by create, update and duplicate"""

    pair: str = Field(..., min_length=1, max_length=30, description="Trading pair (e.g., USDT_BTC)")
    direction: Literal["long", "short"] = Field(..., description="Trade direction")
    bot_type: Literal["single", "multi"] = Field(..., description="Single-pair or multi-pair bot")
    profit_currency: Literal["quote", "base"] = Field(..., description="Currency profit is taken in")
    base_order_size: float = Field(..., gt=0, description="Base order volume")
    start_order_type: Literal["market", "limit"] = Field(..., description="Start order type")
    take_profit_type: Literal["total", "step"] = Field(..., description="Take profit type")
    target_profit_percent: float = Field(..., gt=0, le=100, description="Target profit percentage")

    # Safety orders
    safety_order_volume: Optional[float] = Field(None, gt=0, description="Defaults to the base order size")
    max_safety_orders: int = Field(5, ge=1, le=25)
    safety_order_step_percentage: float = Field(2.0, ge=0.1, le=50.0)

    # Risk management
    stop_loss_percentage: float = Field(0.0, ge=0, le=100)
    cooldown: int = Field(0, ge=0, description="Seconds between deals")

    note: str = Field("", max_length=1000)

    @model_validator(mode="after")
    def default_safety_order_volume(self):
        if self.safety_order_volume is None:
            self.safety_order_volume = self.base_order_size
        return self
