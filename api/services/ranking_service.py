"""
Service for rebuilding the top-N leaderboard of a period.
"""
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import and_
import logging

from config import settings
from database import advisory_xact_lock
from models.engagement import UserPointTotal
from models.period import LeaderboardPeriod
from models.ranking import LeaderboardRanking
from services.exceptions import LeaderboardError, RankingInvariantError
from services.profile_tier_service import ProfileTierService
from services.tier_service import tier_for_rank

logger = logging.getLogger(__name__)


class RankingService:
    """Service for calculating and publishing period rankings."""

    @staticmethod
    def ranked_totals(db: Session, period_id: UUID, limit: Optional[int] = None) -> List[UserPointTotal]:
        """
        Get point totals for a period in leaderboard order.

        Ties on points go to the user who entered the period first, then to the
        lower user_id, so the order is total and reproducible.
        """
        query = db.query(UserPointTotal).filter(
            and_(
                UserPointTotal.period_id == period_id,
                UserPointTotal.total_points > 0
            )
        ).order_by(
            UserPointTotal.total_points.desc(),
            UserPointTotal.entered_at.asc(),
            UserPointTotal.user_id.asc()
        )

        if limit is not None:
            query = query.limit(limit)

        return query.all()

    @staticmethod
    def get_ranking(db: Session, period_id: UUID) -> List[LeaderboardRanking]:
        """Get the stored ranking snapshot of a period, best first."""
        return db.query(LeaderboardRanking).filter(
            LeaderboardRanking.period_id == period_id
        ).order_by(LeaderboardRanking.rank_position.asc()).all()

    @staticmethod
    def refresh_ranking(db: Session, period_id: UUID, now: Optional[datetime] = None) -> List[LeaderboardRanking]:
        """
        Rebuild the ranking snapshot of a period from its point totals.

        The previous snapshot is deleted and the new one inserted in a single
        transaction. Refreshes of the same period are serialized by an advisory
        lock so two rebuilds never interleave. When the period is active and the
        set of (user, tier) pairs changed, the profile tier badges are republished.

        Args:
            db: Database session
            period_id: Period to rank
            now: Timestamp for last_updated (defaults to now)

        Returns:
            The new ranking entries ordered by rank_position

        Raises:
            LeaderboardError: If the period does not exist
            RankingInvariantError: If more than LEADERBOARD_SIZE entries were produced
        """
        if now is None:
            now = datetime.utcnow()

        advisory_xact_lock(db, f"leaderboard-ranking:{period_id}")

        period = db.query(LeaderboardPeriod).filter(LeaderboardPeriod.id == period_id).first()
        if period is None:
            raise LeaderboardError("PERIOD_NOT_FOUND", f"Period {period_id} not found")

        previous = {
            (entry.user_id, entry.tier)
            for entry in RankingService.get_ranking(db, period_id)
        }

        totals = RankingService.ranked_totals(db, period_id, limit=settings.LEADERBOARD_SIZE)

        if len(totals) > settings.LEADERBOARD_SIZE:
            db.rollback()
            raise RankingInvariantError(
                f"Ranking for period {period_id} produced {len(totals)} rows, limit is {settings.LEADERBOARD_SIZE}"
            )

        # Delete existing rankings for this period
        db.query(LeaderboardRanking).filter(
            LeaderboardRanking.period_id == period_id
        ).delete(synchronize_session=False)
        db.flush()

        entries = []
        for position, total in enumerate(totals, start=1):
            entries.append(LeaderboardRanking(
                period_id=period_id,
                user_id=total.user_id,
                rank_position=position,
                tier=tier_for_rank(position).value,
                total_points=total.total_points,
                last_updated=now,
            ))

        db.add_all(entries)
        db.flush()

        current = {(entry.user_id, entry.tier) for entry in entries}
        if period.is_active and current != previous:
            ProfileTierService.publish_tiers(
                db, {entry.user_id: entry.tier for entry in entries}, now
            )

        db.commit()

        logger.info(f"Refreshed ranking for period {period_id}: {len(entries)} entries")

        return RankingService.get_ranking(db, period_id)
