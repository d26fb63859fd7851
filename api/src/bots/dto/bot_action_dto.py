from typing import Optional

from pydantic import BaseModel, Field


class BotActionDto(BaseModel):
    """Body of pause / start / emergency-stop / delete requests"""
    user_id: str = Field(..., min_length=1, max_length=255, description="Owner identifier")


class DuplicateBotDto(BotActionDto):
    new_name: Optional[str] = Field(None, min_length=1, max_length=100, description="Defaults to '<name> (copy)'")
