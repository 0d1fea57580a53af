"""
Hooks called by the content layer whenever a point-bearing interaction changes.
"""
from typing import Optional
from datetime import datetime
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from config import settings
from models.engagement import EngagementEvent
from schemas.engagement import ActionType, ContentType
from services.ledger_service import LedgerService
from services.period_service import PeriodService
from services.ranking_service import RankingService

logger = logging.getLogger(__name__)


class EngagementService:
    """Translates content-layer state transitions into ledger writes."""

    @staticmethod
    def record(
        db: Session,
        actor_id: UUID,
        subject_user_id: UUID,
        action_type: ActionType,
        content_type: ContentType,
        content_id: UUID,
        sign: int,
        now: Optional[datetime] = None
    ) -> Optional[EngagementEvent]:
        """
        Resolve the active period once and apply the event to it.

        When LEADERBOARD_REFRESH_ON_WRITE is set the ranking is rebuilt right
        after the write; otherwise the scheduled refresh picks it up.
        """
        if now is None:
            now = datetime.utcnow()

        period = PeriodService.get_or_create_active_period(db, now)
        period_id = period.id

        event = LedgerService.apply_event(
            db,
            period_id=period_id,
            actor_id=actor_id,
            subject_user_id=subject_user_id,
            action_type=action_type,
            content_type=content_type,
            content_id=content_id,
            sign=sign,
            now=now,
        )

        if event is not None and event.points_delta != 0 and settings.LEADERBOARD_REFRESH_ON_WRITE:
            RankingService.refresh_ranking(db, period_id, now)

        return event

    @staticmethod
    def on_like_toggled(
        db: Session,
        actor_id: UUID,
        subject_user_id: UUID,
        content_type: ContentType,
        content_id: UUID,
        liked: bool,
        now: Optional[datetime] = None
    ) -> Optional[EngagementEvent]:
        return EngagementService.record(
            db, actor_id, subject_user_id, ActionType.LIKE, content_type, content_id,
            sign=1 if liked else -1, now=now
        )

    @staticmethod
    def on_comment_created(
        db: Session,
        actor_id: UUID,
        subject_user_id: UUID,
        content_type: ContentType,
        content_id: UUID,
        now: Optional[datetime] = None
    ) -> Optional[EngagementEvent]:
        return EngagementService.record(
            db, actor_id, subject_user_id, ActionType.COMMENT, content_type, content_id,
            sign=1, now=now
        )

    @staticmethod
    def on_comment_deleted(
        db: Session,
        actor_id: UUID,
        subject_user_id: UUID,
        content_type: ContentType,
        content_id: UUID,
        now: Optional[datetime] = None
    ) -> Optional[EngagementEvent]:
        return EngagementService.record(
            db, actor_id, subject_user_id, ActionType.COMMENT, content_type, content_id,
            sign=-1, now=now
        )

    @staticmethod
    def on_content_shared(
        db: Session,
        actor_id: UUID,
        subject_user_id: UUID,
        content_type: ContentType,
        content_id: UUID,
        now: Optional[datetime] = None
    ) -> Optional[EngagementEvent]:
        # Shares cannot be undone
        return EngagementService.record(
            db, actor_id, subject_user_id, ActionType.SHARE, content_type, content_id,
            sign=1, now=now
        )
