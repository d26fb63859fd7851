from database.models import Bot

from ...three_commas.models import RemoteBotRequest
from ..dto import BotConfig

BOT_TYPE_TO_REMOTE = {"single": "simple", "multi": "composite"}
PROFIT_CURRENCY_TO_REMOTE = {"quote": "quote_currency", "base": "base_currency"}


def build_remote_bot_request(name: str, account_id: int, config: BotConfig, active: bool = True) -> RemoteBotRequest:
    """Map a local bot configuration onto the 3Commas bot schema"""
    return RemoteBotRequest(
        name=name,
        account_id=account_id,
        pairs=config.pair,
        strategy=config.direction,
        bot_type=BOT_TYPE_TO_REMOTE[config.bot_type],
        profit_currency=PROFIT_CURRENCY_TO_REMOTE[config.profit_currency],
        base_order_volume=config.base_order_size,
        safety_order_volume=config.safety_order_volume,
        max_safety_orders=config.max_safety_orders,
        safety_order_step_percentage=config.safety_order_step_percentage,
        take_profit=config.target_profit_percent,
        take_profit_type=config.take_profit_type,
        start_order_type=config.start_order_type,
        stop_loss_percentage=config.stop_loss_percentage,
        cooldown=config.cooldown,
        note=config.note,
        active=active,
    )


def config_from_bot(bot: Bot) -> BotConfig:
    return BotConfig(
        pair=bot.pair,
        direction=bot.strategy,
        bot_type=bot.bot_type,
        profit_currency=bot.profit_currency,
        base_order_size=bot.base_order_size,
        start_order_type=bot.start_order_type,
        take_profit_type=bot.take_profit_type,
        target_profit_percent=bot.target_profit_percent,
        safety_order_volume=bot.safety_order_volume,
        max_safety_orders=bot.max_safety_orders,
        safety_order_step_percentage=bot.safety_order_step_percentage,
        stop_loss_percentage=bot.stop_loss_percentage,
        cooldown=bot.cooldown,
        note=bot.note,
    )


def apply_config(bot: Bot, config: BotConfig) -> None:
    """Overwrite the configuration snapshot on a local record"""
    bot.pair = config.pair
    bot.strategy = config.direction
    bot.bot_type = config.bot_type
    bot.profit_currency = config.profit_currency
    bot.base_order_size = config.base_order_size
    bot.start_order_type = config.start_order_type
    bot.take_profit_type = config.take_profit_type
    bot.target_profit_percent = config.target_profit_percent
    bot.safety_order_volume = config.safety_order_volume
    bot.max_safety_orders = config.max_safety_orders
    bot.safety_order_step_percentage = config.safety_order_step_percentage
    bot.stop_loss_percentage = config.stop_loss_percentage
    bot.cooldown = config.cooldown
    bot.note = config.note
