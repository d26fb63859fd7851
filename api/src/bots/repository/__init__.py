from .bot_repository import BotRepository, bot_repository

__all__ = ["BotRepository", "bot_repository"]
