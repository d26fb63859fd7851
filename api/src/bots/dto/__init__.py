from .bot_config import BotConfig
from .create_bot_dto import CreateBotDto
from .update_bot_dto import UpdateBotDto
from .bot_action_dto import BotActionDto, DuplicateBotDto

__all__ = [
    "BotConfig",
    "CreateBotDto",
    "UpdateBotDto",
    "BotActionDto",
    "DuplicateBotDto",
]
