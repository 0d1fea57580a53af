"""
Celery tasks for leaderboard refresh, period rollover and reconciliation.
"""
import logging

from tasks.celery_app import celery_app
from database import SessionLocal
from services.ledger_service import LedgerService
from services.period_service import PeriodService
from services.ranking_service import RankingService
from services.reward_service import RewardService

logger = logging.getLogger(__name__)


@celery_app.task(name="tasks.refresh_active_ranking")
def refresh_active_ranking():
    """
    Rebuild the active period's ranking.

    Runs every LEADERBOARD_REFRESH_SECONDS, which is the staleness bound of
    the published leaderboard.
    """
    db = SessionLocal()

    try:
        period = PeriodService.get_or_create_active_period(db)
        period_id = period.id

        entries = RankingService.refresh_ranking(db, period_id)

        return {
            "status": "success",
            "period_id": str(period_id),
            "entries": len(entries)
        }

    except Exception as e:
        logger.error(f"Failed to refresh active ranking: {e}")
        raise

    finally:
        db.close()


@celery_app.task(name="tasks.roll_over_period")
def roll_over_period():
    """
    Close the active period if it has expired and open the next one.
    """
    db = SessionLocal()

    try:
        period = PeriodService.get_or_create_active_period(db)

        return {
            "status": "success",
            "period_id": str(period.id),
            "end_time": period.end_time.isoformat()
        }

    except Exception as e:
        logger.error(f"Failed to roll over leaderboard period: {e}")
        raise

    finally:
        db.close()


@celery_app.task(name="tasks.reconcile_point_totals")
def reconcile_point_totals():
    """
    Recompute the active period's totals from the event log and re-rank.
    """
    db = SessionLocal()

    try:
        period = PeriodService.get_or_create_active_period(db)
        period_id = period.id

        corrected = LedgerService.reconcile_totals(db, period_id)
        if corrected:
            RankingService.refresh_ranking(db, period_id)

        return {
            "status": "success",
            "period_id": str(period_id),
            "corrected": corrected
        }

    except Exception as e:
        logger.error(f"Failed to reconcile point totals: {e}")
        raise

    finally:
        db.close()


@celery_app.task(name="tasks.resume_pending_rollovers")
def resume_pending_rollovers():
    """
    Finish rollovers that crashed between marking a period completed and issuing rewards.
    """
    db = SessionLocal()

    try:
        resumed = RewardService.resume_pending_rollovers(db)

        if resumed:
            logger.info(f"Resumed {resumed} interrupted rollovers")

        return {
            "status": "success",
            "resumed": resumed
        }

    except Exception as e:
        logger.error(f"Failed to resume pending rollovers: {e}")
        raise

    finally:
        db.close()
