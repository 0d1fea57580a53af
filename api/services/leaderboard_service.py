"""
Read side of the leaderboard: current ranking, per-user stats and reward history.
"""
from typing import Any, Dict, List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import and_
import logging

from config import settings
from models.engagement import UserPointTotal
from models.ranking import LeaderboardRanking
from models.reward import UserReward
from services.period_service import PeriodService
from services.ranking_service import RankingService
from services.reward_service import RewardService

logger = logging.getLogger(__name__)


class LeaderboardService:
    """Queries backing leaderboard display. Never writes."""

    @staticmethod
    def get_current_ranking(db: Session) -> List[LeaderboardRanking]:
        """Top entries of the active period, best first. Empty when no period is active."""
        period = PeriodService.get_active_period(db)
        if period is None:
            return []
        return RankingService.get_ranking(db, period.id)

    @staticmethod
    def get_user_stats(db: Session, user_id: UUID) -> Dict[str, Any]:
        """
        Get a user's standing in the active period.

        Points are read from the live total; rank and tier come from the last
        ranking snapshot, so they lag by at most one refresh interval.

        Returns:
            Dict with total_points, rank_position, tier, points_to_next_rank
            and is_in_top_50
        """
        stats = {
            "total_points": 0.0,
            "rank_position": None,
            "tier": None,
            "points_to_next_rank": 0.0,
            "is_in_top_50": False,
        }

        period = PeriodService.get_active_period(db)
        if period is None:
            return stats

        total = db.query(UserPointTotal).filter(
            and_(
                UserPointTotal.user_id == user_id,
                UserPointTotal.period_id == period.id
            )
        ).first()
        user_points = total.total_points if total else 0.0
        stats["total_points"] = user_points

        ranking = RankingService.get_ranking(db, period.id)
        entry = next((e for e in ranking if e.user_id == user_id), None)

        if entry is not None:
            stats["rank_position"] = entry.rank_position
            stats["tier"] = entry.tier
            stats["is_in_top_50"] = True
            if entry.rank_position > 1:
                ahead = ranking[entry.rank_position - 2]
                stats["points_to_next_rank"] = round(max(0.0, ahead.total_points - user_points), 1)
        else:
            # Points needed to pass the last ranked user
            threshold = ranking[-1].total_points if len(ranking) >= settings.LEADERBOARD_SIZE else 0.0
            stats["points_to_next_rank"] = round(max(0.0, threshold - user_points + 0.1), 1)

        return stats

    @staticmethod
    def get_user_reward_history(db: Session, user_id: UUID, limit: Optional[int] = None) -> List[UserReward]:
        return RewardService.get_user_rewards(db, user_id, limit)

    @staticmethod
    def get_leaderboard_snapshot(db: Session, user_id: Optional[UUID] = None) -> Dict[str, Any]:
        """
        Everything the leaderboard screen needs in one call.

        Returns:
            Dict with period, entries, total_participants, user_stats and
            recent_rewards (the last two only when user_id is given)
        """
        period = PeriodService.get_active_period(db)
        entries = RankingService.get_ranking(db, period.id) if period is not None else []

        total_participants = 0
        if period is not None:
            total_participants = db.query(UserPointTotal).filter(
                and_(
                    UserPointTotal.period_id == period.id,
                    UserPointTotal.total_points > 0
                )
            ).count()

        snapshot = {
            "period": period,
            "entries": entries,
            "total_participants": total_participants,
            "user_stats": None,
            "recent_rewards": [],
        }

        if user_id is not None:
            snapshot["user_stats"] = LeaderboardService.get_user_stats(db, user_id)
            snapshot["recent_rewards"] = RewardService.get_user_rewards(
                db, user_id, limit=settings.LEADERBOARD_REWARDS_HISTORY_LIMIT
            )

        return snapshot
