import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger, CheckConstraint, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint, Uuid,
)

from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


BOT_STATUSES = ("running", "paused", "stopped", "error")
BOT_NAME_MAX_LENGTH = 100


class User(Base):
    """Account owner with the (encrypted) exchange credentials and the linked 3Commas account"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, unique=True)  # external identity

    # Exchange credentials, encrypted at rest
    binance_api_key = Column(Text, nullable=True)
    binance_api_secret = Column(Text, nullable=True)
    three_commas_account_id = Column(BigInteger, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def has_exchange_credentials(self) -> bool:
        return bool(self.binance_api_key and self.binance_api_secret)


class Bot(Base):
    """Local mirror of a bot running on 3Commas"""
    __tablename__ = "bots"
    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_bots_owner_name"),
        Index("ix_bots_owner_status", "owner_id", "status"),
        CheckConstraint(
            "status IN ({})".format(", ".join(f"'{status}'" for status in BOT_STATUSES)),
            name="ck_bots_status",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    three_commas_bot_id = Column(BigInteger, nullable=True, index=True)
    exchange_id = Column(BigInteger, nullable=False)

    # Configuration snapshot
    name = Column(String(BOT_NAME_MAX_LENGTH), nullable=False)
    pair = Column(String(30), nullable=False)
    strategy = Column(String(10), nullable=False)          # long / short
    bot_type = Column(String(10), nullable=False)          # single / multi
    profit_currency = Column(String(10), nullable=False)   # quote / base
    base_order_size = Column(Float, nullable=False)
    start_order_type = Column(String(10), nullable=False)  # market / limit
    take_profit_type = Column(String(10), nullable=False)  # total / step
    target_profit_percent = Column(Float, nullable=False)
    safety_order_volume = Column(Float, nullable=False)
    max_safety_orders = Column(Integer, nullable=False, default=5)
    safety_order_step_percentage = Column(Float, nullable=False, default=2.0)
    stop_loss_percentage = Column(Float, nullable=False, default=0.0)
    cooldown = Column(Integer, nullable=False, default=0)
    note = Column(Text, nullable=False, default="")
    config_version = Column(Integer, nullable=False, default=1)

    status = Column(String(10), nullable=False, default="running")

    # Advisory performance cache; 3Commas stays authoritative
    total_deals = Column(Integer, nullable=False, default=0)
    total_profit = Column(Float, nullable=False, default=0.0)
    last_deal_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def total_value(self) -> float:
        return self.base_order_size + self.safety_order_volume * self.max_safety_orders
