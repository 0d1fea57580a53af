"""
UserReward model - immutable record of what a user earned when a period closed.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Index, Uuid
from sqlalchemy.orm import relationship
from database import Base
import uuid
from datetime import datetime


class UserReward(Base):
    """Reward issued at period close. One row per user per period."""
    __tablename__ = "user_rewards"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    period_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leaderboard_periods.id", ondelete="CASCADE"),
        nullable=False,
    )

    # 'premium_badge', 'normal_badge', 'premium_title', 'normal_title'
    reward_type = Column(String(30), nullable=False)
    rank_achieved = Column(Integer, nullable=False)
    tier = Column(String(50), nullable=False)
    title_text = Column(String(100), nullable=True)
    badge_icon = Column(String(100), nullable=True)

    earned_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    period = relationship("LeaderboardPeriod")

    __table_args__ = (
        # Guards against issuing a reward twice when close_period is retried
        Index('uq_user_rewards_user_period', 'user_id', 'period_id', unique=True),
        Index('idx_user_rewards_period_rank', 'period_id', 'rank_achieved'),
    )

    def __repr__(self):
        return f"<UserReward(user_id={self.user_id}, period_id={self.period_id}, rank={self.rank_achieved}, tier={self.tier})>"
