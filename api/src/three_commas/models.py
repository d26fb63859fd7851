"""
Typed request/response shapes for the 3Commas API.

Requests are serialized once with ``model_dump_json`` and that string is both
signed and sent. Responses are validated at the boundary; unknown fields are
ignored, missing required fields are treated as a malformed upstream answer.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class RemoteBotRequest(BaseModel):
    """Payload for create_bot and update"""
    name: str
    account_id: int
    pairs: str
    strategy: Literal["long", "short"]
    bot_type: Literal["simple", "composite"]
    profit_currency: Literal["quote_currency", "base_currency"]
    base_order_volume: float
    base_order_volume_type: str = "quote_currency"
    safety_order_volume: float
    safety_order_volume_type: str = "quote_currency"
    martingale_volume_coefficient: float = 1.0
    martingale_step_coefficient: float = 1.0
    max_safety_orders: int
    active_safety_orders_count: int = 1
    safety_order_step_percentage: float
    take_profit: float
    take_profit_type: Literal["total", "step"]
    start_order_type: Literal["market", "limit"]
    stop_loss_percentage: float = 0.0
    cooldown: int = 0
    note: str = ""
    strategy_list: List[Dict[str, Any]] = Field(default_factory=lambda: [{"strategy": "nonstop"}])
    active: bool = True


class RemoteBot(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: Optional[str] = None
    account_id: Optional[int] = None
    is_enabled: Optional[bool] = None
    pairs: Optional[Any] = None


class RemoteDeal(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    bot_id: Optional[int] = None
    status: Optional[str] = None
    created_at: datetime
    closed_at: Optional[datetime] = None
    final_profit: Optional[float] = None
    actual_profit: Optional[float] = None
    final_profit_percentage: Optional[float] = None

    @property
    def profit(self) -> float:
        if self.final_profit is not None:
            return self.final_profit
        return self.actual_profit or 0.0

    @property
    def profit_percent(self) -> float:
        return self.final_profit_percentage or 0.0

    @property
    def finished_at(self) -> Optional[datetime]:
        return self.closed_at

    @property
    def is_completed(self) -> bool:
        return self.closed_at is not None


class RemoteAccountRequest(BaseModel):
    """Payload for /ver1/accounts/new (flat, as 3Commas expects)"""
    type: str = "binance"
    name: str
    api_key: str
    secret: str
    passphrase: str = ""

    def redacted(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "api_key": redact(self.api_key),
            "secret": redact(self.secret),
            "passphrase": "****" if self.passphrase else "",
        }


class RemoteAccount(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: Optional[str] = None
    account_type: Optional[str] = None


def redact(value: Optional[str], keep: int = 4) -> Optional[str]:
    if not value:
        return value
    if len(value) <= keep * 2:
        return "****"
    return f"{value[:keep]}…{value[-keep:]}"
