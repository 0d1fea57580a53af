"""
Engagement ledger models - the append-only event log and the per-user totals derived from it.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Float, Index, Uuid
from sqlalchemy.orm import relationship
from database import Base
import uuid
from datetime import datetime


class EngagementEvent(Base):
    """
    One point-affecting interaction (like, comment, share).

    Rows are never updated. Undoing an interaction writes a new row carrying the
    negated delta and pointing at the original through ``reverses_event_id``.
    """
    __tablename__ = "engagement_events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Actor performing the interaction and the owner of the content
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    subject_user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    # 'like', 'comment', 'share'
    action_type = Column(String(20), nullable=False)
    # 'post', 'reel', 'story'
    content_type = Column(String(20), nullable=False)
    content_id = Column(Uuid(as_uuid=True), nullable=False)

    period_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leaderboard_periods.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Zero for self-engagement
    points_delta = Column(Float, nullable=False, default=0.0)

    reverses_event_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("engagement_events.id"),
        nullable=True,
        unique=True,
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    period = relationship("LeaderboardPeriod")

    __table_args__ = (
        Index('idx_engagement_events_lookup', 'period_id', 'user_id', 'action_type', 'content_type', 'content_id'),
        Index('idx_engagement_events_subject_period', 'subject_user_id', 'period_id'),
    )

    @property
    def is_reversal(self) -> bool:
        return self.reverses_event_id is not None

    def __repr__(self):
        return (
            f"<EngagementEvent(id={self.id}, actor={self.user_id}, subject={self.subject_user_id}, "
            f"{self.action_type}/{self.content_type}, delta={self.points_delta})>"
        )


class UserPointTotal(Base):
    """Materialized sum of an owner's event deltas within one period."""
    __tablename__ = "user_point_totals"

    user_id = Column(Uuid(as_uuid=True), primary_key=True)
    period_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leaderboard_periods.id", ondelete="CASCADE"),
        primary_key=True,
    )

    total_points = Column(Float, nullable=False, default=0.0)

    # First point-bearing event in the period; set on insert only, breaks ties
    entered_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_user_point_totals_leaderboard', 'period_id', 'total_points'),
    )

    def __repr__(self):
        return f"<UserPointTotal(user_id={self.user_id}, period_id={self.period_id}, total={self.total_points})>"
