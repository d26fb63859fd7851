from typing import Any, List, Optional

from pydantic import BaseModel

from .bot_response import BotResponse


class BotActionResponse(BaseModel):
    """Result of a lifecycle operation"""
    success: bool = True
    message: str
    data: Optional[BotResponse] = None


class BotListResponse(BaseModel):
    success: bool = True
    message: str = "Bots fetched successfully"
    total: int
    data: List[BotResponse]


class BotDetailsResponse(BaseModel):
    bot: BotResponse
    remote: Optional[Any] = None
    has_remote_data: bool = False
