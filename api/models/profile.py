"""
Profile model - the profile fields the leaderboard reads and the denormalized tier badge it maintains.
"""
from sqlalchemy import Column, String, DateTime, Uuid
from database import Base
from datetime import datetime


class Profile(Base):
    """User profile. ``current_tier`` is kept in sync by the leaderboard engine."""
    __tablename__ = "profiles"

    # Same id as the user
    id = Column(Uuid(as_uuid=True), primary_key=True)
    username = Column(String(100), nullable=True)
    avatar_url = Column(String(500), nullable=True)

    # Tier badge for O(1) display; NULL when outside the ranked set
    current_tier = Column(String(50), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Profile(id={self.id}, username={self.username}, tier={self.current_tier})>"
