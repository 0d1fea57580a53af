import uuid
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import START, at
from models import LeaderboardPeriod, UserReward
from services.exceptions import NoActivePeriodError
from services.ledger_service import LedgerService
from services.period_service import PeriodService


def active_count(db):
    return db.query(LeaderboardPeriod).filter(
        LeaderboardPeriod.status == LeaderboardPeriod.STATUS_ACTIVE
    ).count()


def test_first_period_starts_now_and_lasts_a_week(db):
    period = PeriodService.get_or_create_active_period(db, now=START)

    assert period.status == LeaderboardPeriod.STATUS_ACTIVE
    assert period.start_time == START
    assert period.end_time == START + timedelta(days=7)


def test_repeated_calls_return_the_same_period(db, period):
    again = PeriodService.get_or_create_active_period(db, now=START + timedelta(days=3))
    assert again.id == period.id
    assert db.query(LeaderboardPeriod).count() == 1


def test_expired_period_rolls_over_contiguously(db, period):
    old_id, old_end = period.id, period.end_time

    new = PeriodService.get_or_create_active_period(db, now=START + timedelta(days=8))

    old = db.query(LeaderboardPeriod).filter(LeaderboardPeriod.id == old_id).one()
    assert old.status == LeaderboardPeriod.STATUS_COMPLETED
    assert old.rewards_distributed_at is not None
    assert new.id != old_id
    assert new.start_time == old_end
    assert new.end_time == old_end + timedelta(days=7)
    assert active_count(db) == 1


def test_period_ending_exactly_now_rolls_over(db, period):
    new = PeriodService.get_or_create_active_period(db, now=period.end_time)
    assert new.start_time == START + timedelta(days=7)


def test_idle_weeks_are_rolled_through(db, period):
    new = PeriodService.get_or_create_active_period(db, now=START + timedelta(days=22))

    periods = db.query(LeaderboardPeriod).order_by(LeaderboardPeriod.start_time).all()
    assert len(periods) == 4
    for previous, following in zip(periods, periods[1:]):
        assert following.start_time == previous.end_time
    assert new.id == periods[-1].id
    assert active_count(db) == 1


def test_exactly_one_active_period_over_simulated_time(db):
    for day in range(0, 45):
        PeriodService.get_or_create_active_period(db, now=START + timedelta(days=day, hours=13))
        assert active_count(db) == 1


def test_storage_rejects_a_second_active_period(db, period):
    db.add(LeaderboardPeriod(
        start_time=START + timedelta(days=30),
        end_time=START + timedelta(days=37),
        status=LeaderboardPeriod.STATUS_ACTIVE,
    ))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_losing_creator_rereads_the_winner(db, period):
    winner = PeriodService._open_period(db, START + timedelta(days=30))

    assert winner.id == period.id
    assert active_count(db) == 1


def test_unrecoverable_creation_failure_raises(db):
    db.add(LeaderboardPeriod(
        start_time=START,
        end_time=START + timedelta(days=7),
        status=LeaderboardPeriod.STATUS_COMPLETED,
        rewards_distributed_at=START + timedelta(days=7),
    ))
    db.commit()

    # Same start_time as the completed period and no active winner to fall back on
    with pytest.raises(NoActivePeriodError):
        PeriodService._open_period(db, START)


def test_missing_active_period_resumes_from_last_completed(db):
    db.add(LeaderboardPeriod(
        start_time=START,
        end_time=START + timedelta(days=7),
        status=LeaderboardPeriod.STATUS_COMPLETED,
    ))
    db.commit()

    period = PeriodService.get_or_create_active_period(db, now=START + timedelta(days=8))

    assert period.start_time == START + timedelta(days=7)
    completed = db.query(LeaderboardPeriod).filter(LeaderboardPeriod.start_time == START).one()
    assert completed.rewards_distributed_at is not None


def test_rollover_issues_rewards_from_final_ranking(db, period, users):
    post = uuid.uuid4()
    LedgerService.apply_event(db, period.id, users[0], users[1], "comment", "post", post, 1, now=at(5))
    LedgerService.apply_event(db, period.id, users[0], users[2], "share", "post", post, 1, now=at(6))

    # No refresh has run yet; rollover must flush the ranking itself
    PeriodService.get_or_create_active_period(db, now=START + timedelta(days=7, minutes=1))

    rewards = db.query(UserReward).order_by(UserReward.rank_achieved).all()
    assert [(r.user_id, r.rank_achieved) for r in rewards] == [(users[2], 1), (users[1], 2)]


def test_completed_period_refuses_late_writes_and_keeps_its_snapshot(db, period, users):
    post = uuid.uuid4()
    old_id = period.id
    LedgerService.apply_event(db, old_id, users[0], users[1], "share", "post", post, 1, now=at(5))

    PeriodService.get_or_create_active_period(db, now=START + timedelta(days=7, minutes=1))

    # A straggler still holding the old period id is turned away
    with pytest.raises(NoActivePeriodError):
        LedgerService.apply_event(db, old_id, users[0], users[2], "share", "post", post, 1, now=at(10))

    totals = LedgerService.compute_totals_from_events(db, old_id)
    rewards = db.query(UserReward).filter(UserReward.period_id == old_id).all()
    assert set(totals) == {users[1]}
    assert [(r.user_id, r.rank_achieved) for r in rewards] == [(users[1], 1)]


def test_resumed_rollover_takes_the_final_ranking(db, period, users):
    LedgerService.apply_event(db, period.id, users[0], users[1], "share", "post", uuid.uuid4(), 1, now=at(5))

    # Crash right after the period was marked completed
    period.status = LeaderboardPeriod.STATUS_COMPLETED
    db.commit()

    PeriodService.get_or_create_active_period(db, now=START + timedelta(days=7, minutes=1))

    rewards = db.query(UserReward).all()
    assert [(r.user_id, r.rank_achieved) for r in rewards] == [(users[1], 1)]
