from .database import Base, build_engine, build_session_factory, create_tables, get_db
from .models import Bot, User, BOT_STATUSES, BOT_NAME_MAX_LENGTH

__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "create_tables",
    "get_db",
    "Bot",
    "User",
    "BOT_STATUSES",
    "BOT_NAME_MAX_LENGTH",
]
