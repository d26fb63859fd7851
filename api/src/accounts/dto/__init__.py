from .connect_exchange_dto import ConnectExchangeDto, DisconnectExchangeDto

__all__ = ["ConnectExchangeDto", "DisconnectExchangeDto"]
