from .bot_response import BotResponse
from .bot_action_response import BotActionResponse, BotListResponse, BotDetailsResponse
from .performance_response import (
    PerformanceSummary, BotPerformanceResponse, DealResponse, BotSummary, BotSummaryResponse
)

__all__ = [
    "BotResponse",
    "BotActionResponse",
    "BotListResponse",
    "BotDetailsResponse",
    "PerformanceSummary",
    "BotPerformanceResponse",
    "DealResponse",
    "BotSummary",
    "BotSummaryResponse",
]
