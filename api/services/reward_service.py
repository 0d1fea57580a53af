"""
Reward distribution at period close.
"""
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import and_
import logging
import uuid

from database import advisory_xact_lock, dialect_insert
from models.period import LeaderboardPeriod
from models.ranking import LeaderboardRanking
from models.reward import UserReward
from services.exceptions import LeaderboardError, PeriodStateError, RankingInvariantError
from services.profile_tier_service import ProfileTierService
from services.ranking_service import RankingService
from services.tier_service import reward_for_rank, tier_for_rank

logger = logging.getLogger(__name__)


class RewardService:
    """Service for issuing period rewards exactly once."""

    @staticmethod
    def close_period(db: Session, period_id: UUID, now: Optional[datetime] = None) -> int:
        """
        Issue rewards for a completed period and publish the earned tiers.

        Every user in the period's final ranking snapshot gets one UserReward.
        The insert skips rows that already exist, so a retried call (for example
        after a crash between issuing rewards and updating profiles) finishes the
        job without issuing anything twice.

        Args:
            db: Database session
            period_id: Completed period to close
            now: Timestamp for earned_at (defaults to now)

        Returns:
            Number of rewards newly issued by this call

        Raises:
            LeaderboardError: If the period does not exist
            PeriodStateError: If the period is still active
            RankingInvariantError: If the snapshot disagrees with the tier mapping
        """
        if now is None:
            now = datetime.utcnow()

        advisory_xact_lock(db, f"leaderboard-rewards:{period_id}")

        period = db.query(LeaderboardPeriod).filter(LeaderboardPeriod.id == period_id).first()
        if period is None:
            raise LeaderboardError("PERIOD_NOT_FOUND", f"Period {period_id} not found")
        if period.status != LeaderboardPeriod.STATUS_COMPLETED:
            raise PeriodStateError(f"Period {period_id} is {period.status}; only completed periods can be closed")

        ranking = RankingService.get_ranking(db, period_id)

        issued_before = db.query(UserReward).filter(UserReward.period_id == period_id).count()

        rows = []
        for entry in ranking:
            if entry.tier != tier_for_rank(entry.rank_position).value:
                raise RankingInvariantError(
                    f"Entry for user {entry.user_id} at rank {entry.rank_position} has tier {entry.tier}"
                )
            reward = reward_for_rank(entry.rank_position)
            rows.append({
                "id": uuid.uuid4(),
                "user_id": entry.user_id,
                "period_id": period_id,
                "reward_type": reward.reward_type,
                "rank_achieved": entry.rank_position,
                "tier": entry.tier,
                "title_text": reward.title_text,
                "badge_icon": reward.badge_icon,
                "earned_at": now,
            })

        if rows:
            insert = dialect_insert(db)
            table = UserReward.__table__
            stmt = insert(table).values(rows).on_conflict_do_nothing(
                index_elements=[table.c.user_id, table.c.period_id]
            )
            db.execute(stmt)

        issued_after = db.query(UserReward).filter(UserReward.period_id == period_id).count()
        if issued_after > len(ranking):
            db.rollback()
            raise RankingInvariantError(
                f"Period {period_id} has {issued_after} rewards for {len(ranking)} ranked users"
            )

        if RewardService._superseded_by_newer_ranking(db, period):
            # A later period already owns the profile badges
            logger.info(f"Skipping tier publication for period {period_id}; a newer ranking exists")
        else:
            ProfileTierService.publish_tiers(db, {entry.user_id: entry.tier for entry in ranking}, now)

        period.rewards_distributed_at = now
        db.commit()

        issued = issued_after - issued_before
        logger.info(f"Closed period {period_id}: {issued} rewards issued, {len(ranking)} ranked users")

        return issued

    @staticmethod
    def _superseded_by_newer_ranking(db: Session, period: LeaderboardPeriod) -> bool:
        return db.query(LeaderboardRanking.id).join(
            LeaderboardPeriod, LeaderboardRanking.period_id == LeaderboardPeriod.id
        ).filter(
            LeaderboardPeriod.start_time > period.start_time
        ).first() is not None

    @staticmethod
    def resume_pending_rollovers(db: Session, now: Optional[datetime] = None) -> int:
        """
        Finish every completed period whose rewards were never marked distributed.

        Returns:
            Number of periods resumed
        """
        pending = db.query(LeaderboardPeriod).filter(
            and_(
                LeaderboardPeriod.status == LeaderboardPeriod.STATUS_COMPLETED,
                LeaderboardPeriod.rewards_distributed_at.is_(None)
            )
        ).order_by(LeaderboardPeriod.start_time.asc()).all()

        for period in pending:
            period_id = period.id
            logger.warning(f"Resuming interrupted rollover of period {period_id}")
            # The crash may have come before the final ranking was taken
            RankingService.refresh_ranking(db, period_id, now)
            RewardService.close_period(db, period_id, now)

        return len(pending)

    @staticmethod
    def get_user_rewards(db: Session, user_id: UUID, limit: Optional[int] = None) -> List[UserReward]:
        """Get a user's rewards, newest first."""
        query = db.query(UserReward).filter(
            UserReward.user_id == user_id
        ).order_by(UserReward.earned_at.desc(), UserReward.rank_achieved.asc())

        if limit is not None:
            query = query.limit(limit)

        return query.all()
