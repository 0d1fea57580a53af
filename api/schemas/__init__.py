"""
Pydantic schemas for request/response validation.
"""
from .engagement import (
    ActionType,
    ContentType,
    ContentActionRequest,
    LikeToggledRequest,
    EngagementEventResponse,
    EngagementResult,
)
from .reward import UserRewardResponse
from .ranking import (
    PeriodResponse,
    RankingEntry,
    LeaderboardResponse,
    UserStatsResponse,
    LeaderboardSnapshotResponse,
)

__all__ = [
    # Engagement schemas
    "ActionType",
    "ContentType",
    "ContentActionRequest",
    "LikeToggledRequest",
    "EngagementEventResponse",
    "EngagementResult",
    # Reward schemas
    "UserRewardResponse",
    # Ranking schemas
    "PeriodResponse",
    "RankingEntry",
    "LeaderboardResponse",
    "UserStatsResponse",
    "LeaderboardSnapshotResponse",
]
