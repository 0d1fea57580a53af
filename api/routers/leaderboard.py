"""
Leaderboard endpoints - current ranking, user standings and reward history.
"""
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from config import settings
from database import get_db
from schemas import (
    LeaderboardResponse,
    LeaderboardSnapshotResponse,
    PeriodResponse,
    RankingEntry,
    UserRewardResponse,
    UserStatsResponse,
)
from services.leaderboard_service import LeaderboardService
from services.ledger_service import LedgerService
from services.period_service import PeriodService
from services.ranking_service import RankingService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/current", response_model=LeaderboardResponse)
async def get_current_leaderboard(db: Session = Depends(get_db)):
    """
    Get the active period's leaderboard.

    - Returns at most 50 entries ordered by rank
    - Entries lag live points by at most one refresh interval
    """
    period = PeriodService.get_active_period(db)
    entries = LeaderboardService.get_current_ranking(db)

    return LeaderboardResponse(
        period=PeriodResponse.model_validate(period) if period else None,
        entries=[RankingEntry.model_validate(entry) for entry in entries],
    )


@router.get("/snapshot", response_model=LeaderboardSnapshotResponse)
async def get_leaderboard_snapshot(
    user_id: Optional[UUID] = Query(None, description="User whose stats and rewards to include"),
    db: Session = Depends(get_db)
):
    """
    Get leaderboard, user standing and recent rewards in one call.
    """
    snapshot = LeaderboardService.get_leaderboard_snapshot(db, user_id)

    user_stats = None
    if snapshot["user_stats"] is not None:
        user_stats = UserStatsResponse(user_id=user_id, **snapshot["user_stats"])

    return LeaderboardSnapshotResponse(
        period=PeriodResponse.model_validate(snapshot["period"]) if snapshot["period"] else None,
        entries=[RankingEntry.model_validate(entry) for entry in snapshot["entries"]],
        total_participants=snapshot["total_participants"],
        user_stats=user_stats,
        recent_rewards=[UserRewardResponse.model_validate(r) for r in snapshot["recent_rewards"]],
    )


@router.get("/users/{user_id}/stats", response_model=UserStatsResponse)
async def get_user_stats(user_id: UUID, db: Session = Depends(get_db)):
    """
    Get a user's points, rank and tier in the active period.

    - **rank_position** and **tier** are null outside the top 50
    """
    stats = LeaderboardService.get_user_stats(db, user_id)
    return UserStatsResponse(user_id=user_id, **stats)


@router.get("/users/{user_id}/rewards", response_model=List[UserRewardResponse])
async def get_user_rewards(
    user_id: UUID,
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """
    Get rewards a user earned in past periods, newest first.
    """
    rewards = LeaderboardService.get_user_reward_history(db, user_id, limit)
    return [UserRewardResponse.model_validate(r) for r in rewards]


@router.post("/refresh", status_code=status.HTTP_202_ACCEPTED)
async def trigger_refresh(db: Session = Depends(get_db)):
    """
    Rebuild the active period's ranking immediately.

    - Rolls the period over first if it has expired
    """
    period = PeriodService.get_or_create_active_period(db)
    period_id = period.id
    entries = RankingService.refresh_ranking(db, period_id)

    logger.info(f"Manual ranking refresh for period {period_id}")

    return {
        "message": "Ranking refreshed",
        "period_id": str(period_id),
        "entries": len(entries),
        "max_staleness_seconds": settings.LEADERBOARD_REFRESH_SECONDS,
    }


@router.post("/reconcile", status_code=status.HTTP_202_ACCEPTED)
async def trigger_reconciliation(db: Session = Depends(get_db)):
    """
    Recompute the active period's point totals from the event log, then re-rank.

    - Useful for fixing data inconsistencies
    """
    period = PeriodService.get_or_create_active_period(db)
    period_id = period.id
    corrected = LedgerService.reconcile_totals(db, period_id)
    RankingService.refresh_ranking(db, period_id)

    logger.info(f"Manual reconciliation for period {period_id}: {corrected} totals corrected")

    return {
        "message": "Point totals reconciled",
        "period_id": str(period_id),
        "corrected": corrected,
    }
