"""
Performance aggregation over 3Commas deals.

Pure functions, no I/O. Deals that are still open contribute their in-flight
duration as of ``now``, so ``average_deal_duration_ms`` changes between calls
while any deal is open. That is intended.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence

from ...three_commas.models import RemoteDeal
from ..responses import PerformanceSummary


def win_rate(deals: Sequence[RemoteDeal]) -> float:
    """Percentage of deals with a positive profit; 0 for no deals"""
    if not deals:
        return 0.0
    winners = sum(1 for deal in deals if deal.profit > 0)
    return winners / len(deals) * 100


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def average_deal_duration_ms(deals: Sequence[RemoteDeal], now: Optional[datetime] = None) -> float:
    if not deals:
        return 0.0
    now = _as_utc(now or datetime.now(timezone.utc))
    total_ms = 0.0
    for deal in deals:
        end = _as_utc(deal.finished_at) if deal.finished_at else now
        total_ms += (end - _as_utc(deal.created_at)).total_seconds() * 1000
    return total_ms / len(deals)


def aggregate_performance(deals: Sequence[RemoteDeal], now: Optional[datetime] = None) -> PerformanceSummary:
    total = len(deals)
    completed = sum(1 for deal in deals if deal.is_completed)
    profits = [deal.profit for deal in deals]
    total_profit = sum(profits)

    return PerformanceSummary(
        total_deals=total,
        completed_deals=completed,
        active_deals=total - completed,
        total_profit=total_profit,
        total_profit_percent=sum(deal.profit_percent for deal in deals),
        average_profit=total_profit / total if total else 0.0,
        win_rate=win_rate(deals),
        best_deal=max(profits) if profits else None,
        worst_deal=min(profits) if profits else None,
        average_deal_duration_ms=average_deal_duration_ms(deals, now),
    )


def last_deal_at(deals: Sequence[RemoteDeal]) -> Optional[datetime]:
    timestamps = [deal.finished_at or deal.created_at for deal in deals]
    return max(timestamps, key=_as_utc) if timestamps else None
