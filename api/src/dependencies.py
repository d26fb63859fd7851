from starlette.requests import Request

from .accounts.service import AccountService
from .bots.service import BotService
from .settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_bot_service(request: Request) -> BotService:
    return request.app.state.bot_service


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service
