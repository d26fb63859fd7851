from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ConnectExchangeResponse(BaseModel):
    success: bool = True
    message: str = "Binance connected successfully"
    three_commas_account_id: int
    permission_level: str
    can_trade: bool
    note: str


class ExchangeStatusResponse(BaseModel):
    connected: bool
    three_commas_account_id: Optional[int] = None
    credentials_valid: Optional[bool] = None
    permission_level: Optional[str] = None


class AccountDetailsResponse(BaseModel):
    success: bool = True
    message: str = "Account details fetched successfully"
    account: Dict[str, Any]


class RemoteAccountsOverview(BaseModel):
    total: int
    binance: int
    data: List[Dict[str, Any]]


class RemoteBotsOverview(BaseModel):
    total: int
    active: int
    data: List[Dict[str, Any]]


class ConnectionCheckResponse(BaseModel):
    """Result of listing accounts and bots with the service's 3Commas key"""
    success: bool = True
    message: str = "3Commas connection test successful"
    accounts: RemoteAccountsOverview
    bots: RemoteBotsOverview
