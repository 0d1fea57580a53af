"""
Pydantic schemas for engagement hook requests and responses.
"""
from pydantic import BaseModel, ConfigDict
from uuid import UUID
from datetime import datetime
from typing import Optional
from enum import Enum


class ActionType(str, Enum):
    """Enum for engagement actions."""
    LIKE = "like"
    COMMENT = "comment"
    SHARE = "share"


class ContentType(str, Enum):
    """Enum for engageable content."""
    POST = "post"
    REEL = "reel"
    STORY = "story"


class ContentActionRequest(BaseModel):
    """An actor interacting with a piece of content owned by subject_user_id."""
    actor_id: UUID
    subject_user_id: UUID
    content_type: ContentType
    content_id: UUID


class LikeToggledRequest(ContentActionRequest):
    """Like state transition reported by the content layer."""
    liked: bool


class EngagementEventResponse(BaseModel):
    """Schema for a ledger event."""
    id: UUID
    user_id: UUID
    subject_user_id: UUID
    action_type: ActionType
    content_type: ContentType
    content_id: UUID
    period_id: UUID
    points_delta: float
    reverses_event_id: Optional[UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EngagementResult(BaseModel):
    """Outcome of a hook call. ``event`` is None when the call was a no-op."""
    applied: bool
    event: Optional[EngagementEventResponse] = None
