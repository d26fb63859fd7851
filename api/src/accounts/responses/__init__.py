from .exchange_response import (
    AccountDetailsResponse, ConnectExchangeResponse, ConnectionCheckResponse, ExchangeStatusResponse,
    RemoteAccountsOverview, RemoteBotsOverview,
)

__all__ = [
    "AccountDetailsResponse",
    "ConnectExchangeResponse",
    "ConnectionCheckResponse",
    "ExchangeStatusResponse",
    "RemoteAccountsOverview",
    "RemoteBotsOverview",
]
