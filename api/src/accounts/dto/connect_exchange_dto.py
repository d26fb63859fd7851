from typing import Optional

from pydantic import BaseModel, Field


class ConnectExchangeDto(BaseModel):
    """DTO for linking a Binance account to 3Commas"""

    user_id: str = Field(..., min_length=1, max_length=255, description="Owner identifier")
    api_key: str = Field(..., min_length=1, repr=False, description="Binance API key")
    api_secret: str = Field(..., min_length=1, repr=False, description="Binance API secret")
    account_name: Optional[str] = Field(None, min_length=3, max_length=50, description="3Commas account name")


class DisconnectExchangeDto(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
