"""
SQLAlchemy database models.
"""
from .period import LeaderboardPeriod
from .engagement import EngagementEvent, UserPointTotal
from .ranking import LeaderboardRanking
from .reward import UserReward
from .profile import Profile

__all__ = [
    "LeaderboardPeriod",
    "EngagementEvent",
    "UserPointTotal",
    "LeaderboardRanking",
    "UserReward",
    "Profile",
]
