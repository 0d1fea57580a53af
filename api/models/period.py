"""
LeaderboardPeriod model - weekly ranking windows.
"""
from sqlalchemy import Column, String, DateTime, Index, Uuid, text
from database import Base
import uuid
from datetime import datetime


class LeaderboardPeriod(Base):
    """A fixed-length ranking window. Exactly one period is active at a time."""
    __tablename__ = "leaderboard_periods"

    STATUS_ACTIVE = "active"
    STATUS_COMPLETED = "completed"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    start_time = Column(DateTime, nullable=False, unique=True)
    end_time = Column(DateTime, nullable=False)

    # Status options: 'active', 'completed'
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE, index=True)

    completed_at = Column(DateTime, nullable=True)
    # NULL on a completed period means the rollover was interrupted
    rewards_distributed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # At most one active period
        Index(
            'uq_leaderboard_periods_single_active',
            'status',
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index('idx_leaderboard_periods_window', 'start_time', 'end_time'),
    )

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def __repr__(self):
        return f"<LeaderboardPeriod(id={self.id}, start={self.start_time}, status={self.status})>"
