import uuid

import pytest

import tasks.leaderboard_tasks as leaderboard_tasks
from models import LeaderboardPeriod, LeaderboardRanking, UserPointTotal, UserReward
from services.ledger_service import LedgerService
from services.period_service import PeriodService


@pytest.fixture
def task_db(session_factory, monkeypatch):
    """Point the tasks at the test database."""
    monkeypatch.setattr(leaderboard_tasks, "SessionLocal", session_factory)
    return session_factory


def test_refresh_task_ranks_the_active_period(db, task_db, users):
    period = PeriodService.get_or_create_active_period(db)
    LedgerService.apply_event(db, period.id, users[0], users[1], "share", "reel", uuid.uuid4(), 1)

    result = leaderboard_tasks.refresh_active_ranking()

    assert result["status"] == "success"
    assert result["period_id"] == str(period.id)
    assert result["entries"] == 1
    assert db.query(LeaderboardRanking).count() == 1


def test_roll_over_task_opens_a_period(db, task_db):
    result = leaderboard_tasks.roll_over_period()

    assert result["status"] == "success"
    assert db.query(LeaderboardPeriod).filter(
        LeaderboardPeriod.status == LeaderboardPeriod.STATUS_ACTIVE
    ).count() == 1


def test_reconcile_task_fixes_totals(db, task_db, users):
    period = PeriodService.get_or_create_active_period(db)
    LedgerService.apply_event(db, period.id, users[0], users[1], "comment", "post", uuid.uuid4(), 1)
    db.query(UserPointTotal).update({"total_points": 42.0})
    db.commit()

    result = leaderboard_tasks.reconcile_point_totals()

    assert result["corrected"] == 1
    db.expire_all()
    assert db.query(UserPointTotal).one().total_points == 1.5
    assert db.query(LeaderboardRanking).one().total_points == 1.5


def test_resume_task_finishes_interrupted_close(db, task_db, users):
    period = PeriodService.get_or_create_active_period(db)
    LedgerService.apply_event(db, period.id, users[0], users[1], "share", "post", uuid.uuid4(), 1)
    leaderboard_tasks.refresh_active_ranking()

    # Crash between marking completed and issuing rewards
    period.status = LeaderboardPeriod.STATUS_COMPLETED
    db.commit()

    result = leaderboard_tasks.resume_pending_rollovers()

    assert result == {"status": "success", "resumed": 1}
    assert db.query(UserReward).one().user_id == users[1]


def test_task_errors_propagate(task_db, monkeypatch):
    def broken(db, now=None):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(PeriodService, "get_or_create_active_period", broken)

    with pytest.raises(RuntimeError):
        leaderboard_tasks.roll_over_period()
