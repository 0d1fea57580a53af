"""
LeaderboardRanking model - the current top-N snapshot of a period.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Float, Integer, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from database import Base
import uuid
from datetime import datetime


class LeaderboardRanking(Base):
    """Ranked entry for a period. The whole set is replaced on every refresh."""
    __tablename__ = "leaderboard_rankings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    period_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leaderboard_periods.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    rank_position = Column(Integer, nullable=False)
    tier = Column(String(50), nullable=False)
    total_points = Column(Float, nullable=False, default=0.0)

    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)

    period = relationship("LeaderboardPeriod")

    __table_args__ = (
        CheckConstraint('rank_position >= 1 AND rank_position <= 50', name='ck_leaderboard_rankings_position'),
        Index('uq_leaderboard_rankings_period_user', 'period_id', 'user_id', unique=True),
        Index('uq_leaderboard_rankings_period_position', 'period_id', 'rank_position', unique=True),
    )

    def __repr__(self):
        return f"<LeaderboardRanking(user_id={self.user_id}, rank={self.rank_position}, tier={self.tier}, points={self.total_points})>"
