from .bot_service import BotService
from .locks import BotLockRegistry
from .performance import aggregate_performance, win_rate

__all__ = ["BotService", "BotLockRegistry", "aggregate_performance", "win_rate"]
