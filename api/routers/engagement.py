"""
Engagement hook endpoints - called by the content layer on like/comment/share transitions.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database import get_db
from models.engagement import EngagementEvent
from schemas import (
    ContentActionRequest,
    EngagementEventResponse,
    EngagementResult,
    LikeToggledRequest,
)
from services.engagement_service import EngagementService

router = APIRouter()
logger = logging.getLogger(__name__)


def _result(event: EngagementEvent) -> EngagementResult:
    if event is None:
        return EngagementResult(applied=False)
    return EngagementResult(applied=True, event=EngagementEventResponse.model_validate(event))


@router.post("/like-toggled", response_model=EngagementResult)
async def like_toggled(request: LikeToggledRequest, db: Session = Depends(get_db)):
    """
    Record a like becoming true (liked) or false (unliked).

    - Only call on state transitions; repeated likes are ignored
    """
    event = EngagementService.on_like_toggled(
        db,
        actor_id=request.actor_id,
        subject_user_id=request.subject_user_id,
        content_type=request.content_type,
        content_id=request.content_id,
        liked=request.liked,
    )
    return _result(event)


@router.post("/comment-created", response_model=EngagementResult)
async def comment_created(request: ContentActionRequest, db: Session = Depends(get_db)):
    """Record a new comment."""
    event = EngagementService.on_comment_created(
        db,
        actor_id=request.actor_id,
        subject_user_id=request.subject_user_id,
        content_type=request.content_type,
        content_id=request.content_id,
    )
    return _result(event)


@router.post("/comment-deleted", response_model=EngagementResult)
async def comment_deleted(request: ContentActionRequest, db: Session = Depends(get_db)):
    """Reverse the most recent open comment by the actor on the content."""
    event = EngagementService.on_comment_deleted(
        db,
        actor_id=request.actor_id,
        subject_user_id=request.subject_user_id,
        content_type=request.content_type,
        content_id=request.content_id,
    )
    return _result(event)


@router.post("/content-shared", response_model=EngagementResult)
async def content_shared(request: ContentActionRequest, db: Session = Depends(get_db)):
    """Record a share. Shares are not reversible."""
    event = EngagementService.on_content_shared(
        db,
        actor_id=request.actor_id,
        subject_user_id=request.subject_user_id,
        content_type=request.content_type,
        content_id=request.content_id,
    )
    return _result(event)
