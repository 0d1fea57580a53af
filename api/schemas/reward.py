"""
Pydantic schemas for UserReward model.
"""
from pydantic import BaseModel, ConfigDict
from uuid import UUID
from datetime import datetime
from typing import Optional


class UserRewardResponse(BaseModel):
    """Schema for reward responses."""
    id: UUID
    user_id: UUID
    period_id: UUID
    reward_type: str
    rank_achieved: int
    tier: str
    title_text: Optional[str] = None
    badge_icon: Optional[str] = None
    earned_at: datetime

    model_config = ConfigDict(from_attributes=True)
