"""
Pydantic schemas for leaderboard responses.
"""
from pydantic import BaseModel, ConfigDict
from uuid import UUID
from typing import List, Optional
from datetime import datetime

from schemas.reward import UserRewardResponse


class PeriodResponse(BaseModel):
    """A leaderboard period."""
    id: UUID
    start_time: datetime
    end_time: datetime
    status: str  # 'active', 'completed'

    model_config = ConfigDict(from_attributes=True)


class RankingEntry(BaseModel):
    """Single entry in a leaderboard."""
    rank_position: int
    user_id: UUID
    tier: str
    total_points: float
    last_updated: datetime

    model_config = ConfigDict(from_attributes=True)


class LeaderboardResponse(BaseModel):
    """Response containing the active period's leaderboard."""
    period: Optional[PeriodResponse] = None  # None when no period is active
    entries: List[RankingEntry]  # At most LEADERBOARD_SIZE entries


class UserStatsResponse(BaseModel):
    """A user's standing in the active period."""
    user_id: UUID
    total_points: float
    rank_position: Optional[int] = None  # None when outside the top 50
    tier: Optional[str] = None
    points_to_next_rank: float
    is_in_top_50: bool


class LeaderboardSnapshotResponse(BaseModel):
    """Leaderboard, user standing and recent rewards in one payload."""
    period: Optional[PeriodResponse] = None
    entries: List[RankingEntry]
    total_participants: int
    user_stats: Optional[UserStatsResponse] = None
    recent_rewards: List[UserRewardResponse] = []
