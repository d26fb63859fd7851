from pydantic import Field

from .bot_config import BotConfig


class CreateBotDto(BotConfig):
    """DTO for creating a new bot"""

    user_id: str = Field(..., min_length=1, max_length=255, description="Owner identifier")
    bot_name: str = Field(..., min_length=1, max_length=100, description="Bot name, unique per owner")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "mem_sb_cl1234",
                "bot_name": "My Bot",
                "pair": "USDT_BTC",
                "direction": "long",
                "bot_type": "single",
                "profit_currency": "quote",
                "base_order_size": 100,
                "start_order_type": "market",
                "take_profit_type": "total",
                "target_profit_percent": 2.5,
                "max_safety_orders": 5,
            }
        }
