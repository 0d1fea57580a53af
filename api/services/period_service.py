"""
Service owning the weekly leaderboard periods and their rollover.
"""
from typing import Optional
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import and_
import logging

from config import settings
from models.period import LeaderboardPeriod
from services.exceptions import NoActivePeriodError
from services.ranking_service import RankingService
from services.reward_service import RewardService

logger = logging.getLogger(__name__)


class PeriodService:
    """Service for resolving the active period and rolling it over."""

    @staticmethod
    def get_period_bounds(start_time: datetime):
        """
        Get the start and end datetime of a period starting at ``start_time``.

        Returns:
            Tuple of (period_start, period_end)
        """
        return start_time, start_time + timedelta(days=settings.LEADERBOARD_PERIOD_DAYS)

    @staticmethod
    def get_active_period(db: Session) -> Optional[LeaderboardPeriod]:
        """Get the active period without creating or rolling anything."""
        return db.query(LeaderboardPeriod).filter(
            LeaderboardPeriod.status == LeaderboardPeriod.STATUS_ACTIVE
        ).first()

    @staticmethod
    def get_latest_completed_period(db: Session) -> Optional[LeaderboardPeriod]:
        return db.query(LeaderboardPeriod).filter(
            LeaderboardPeriod.status == LeaderboardPeriod.STATUS_COMPLETED
        ).order_by(LeaderboardPeriod.end_time.desc()).first()

    @staticmethod
    def get_or_create_active_period(db: Session, now: Optional[datetime] = None) -> LeaderboardPeriod:
        """
        Resolve the period that writes at ``now`` belong to.

        If no period is active, one is opened where the last completed period
        ended (or at ``now`` if there has never been one), after finishing any
        rollover that was interrupted. An expired active period is rolled over:
        it is marked completed, its final ranking is taken, rewards are issued and
        the next contiguous period is opened. Idle weeks are rolled through one
        at a time so periods never leave gaps.

        Args:
            db: Database session
            now: Reference time (defaults to now)

        Returns:
            The active period covering ``now``

        Raises:
            NoActivePeriodError: If no active period could be established
        """
        if now is None:
            now = datetime.utcnow()

        active = PeriodService.get_active_period(db)

        if active is None:
            RewardService.resume_pending_rollovers(db, now)

            latest = PeriodService.get_latest_completed_period(db)
            start_time = latest.end_time if latest is not None else now
            active = PeriodService._open_period(db, start_time)

        while active.end_time <= now:
            active = PeriodService._roll_over(db, active, now)

        return active

    @staticmethod
    def _roll_over(db: Session, period: LeaderboardPeriod, now: datetime) -> LeaderboardPeriod:
        """Close an expired period and open its successor."""
        period_id = period.id
        end_time = period.end_time

        logger.info(f"Rolling over leaderboard period {period_id} (ended {end_time})")

        # apply_event refuses completed periods, so totals are final once this commits
        marked = db.query(LeaderboardPeriod).filter(
            and_(
                LeaderboardPeriod.id == period_id,
                LeaderboardPeriod.status == LeaderboardPeriod.STATUS_ACTIVE
            )
        ).update(
            {
                LeaderboardPeriod.status: LeaderboardPeriod.STATUS_COMPLETED,
                LeaderboardPeriod.completed_at: now,
            },
            synchronize_session=False
        )
        db.commit()

        if marked:
            RankingService.refresh_ranking(db, period_id, now)
            RewardService.close_period(db, period_id, now)
        else:
            logger.info(f"Period {period_id} was rolled over by another worker")
            winner = PeriodService.get_active_period(db)
            if winner is not None:
                return winner

        return PeriodService._open_period(db, end_time)

    @staticmethod
    def _open_period(db: Session, start_time: datetime) -> LeaderboardPeriod:
        """
        Insert a new active period, retrying until one is in place.

        A unique-constraint failure means another caller opened the period
        first; its row is returned instead.
        """
        period_start, period_end = PeriodService.get_period_bounds(start_time)
        last_error = None

        for attempt in range(1, settings.LEADERBOARD_PERIOD_CREATE_ATTEMPTS + 1):
            try:
                period = LeaderboardPeriod(
                    start_time=period_start,
                    end_time=period_end,
                    status=LeaderboardPeriod.STATUS_ACTIVE,
                )
                db.add(period)
                db.commit()
                db.refresh(period)

                logger.info(f"Opened leaderboard period {period.id}: {period_start} -> {period_end}")
                return period

            except IntegrityError as e:
                db.rollback()
                winner = PeriodService.get_active_period(db)
                if winner is not None:
                    logger.info(f"Lost race opening period at {period_start}; using {winner.id}")
                    return winner
                last_error = e
                logger.warning(f"Opening period at {period_start} conflicted (attempt {attempt}): {e}")

            except SQLAlchemyError as e:
                db.rollback()
                last_error = e
                logger.warning(f"Failed to open period at {period_start} (attempt {attempt}): {e}")

        logger.error(f"Could not establish an active leaderboard period starting {period_start}")
        raise NoActivePeriodError(
            f"Could not open leaderboard period starting {period_start}",
            details={"start_time": period_start.isoformat()},
        ) from last_error
