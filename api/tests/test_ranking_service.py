import uuid

import pytest

from conftest import at, seed_totals
from models import LeaderboardRanking, Profile, UserPointTotal
from services.exceptions import LeaderboardError
from services.leaderboard_service import LeaderboardService
from services.ledger_service import LedgerService
from services.ranking_service import RankingService


def snapshot(entries):
    return [(e.rank_position, e.user_id, e.tier, e.total_points) for e in entries]


def test_ranking_is_truncated_to_fifty(db, period):
    users = [uuid.UUID(int=1000 + i) for i in range(60)]
    seed_totals(db, period.id, {user_id: float(100 - i) for i, user_id in enumerate(users)})

    entries = RankingService.refresh_ranking(db, period.id, now=at(100))

    assert len(entries) == 50
    assert [e.rank_position for e in entries] == list(range(1, 51))
    assert entries[0].user_id == users[0]
    assert entries[-1].user_id == users[49]

    stats = LeaderboardService.get_user_stats(db, users[50])
    assert stats["rank_position"] is None
    assert stats["tier"] is None
    assert stats["total_points"] == 50.0


def test_earlier_total_wins_a_tie(db, period, users):
    early, late = users[0], users[1]
    db.add(UserPointTotal(user_id=late, period_id=period.id, total_points=100.0, entered_at=at(30), updated_at=at(30)))
    db.add(UserPointTotal(user_id=early, period_id=period.id, total_points=100.0, entered_at=at(10), updated_at=at(10)))
    db.commit()

    entries = RankingService.refresh_ranking(db, period.id, now=at(40))

    assert [e.user_id for e in entries] == [early, late]


def test_full_tie_falls_back_to_user_id(db, period):
    high, low = uuid.UUID(int=900), uuid.UUID(int=5)
    seed_totals(db, period.id, {high: 10.0, low: 10.0}, entered_at=at(1))

    entries = RankingService.refresh_ranking(db, period.id, now=at(2))

    assert [e.user_id for e in entries] == [low, high]


def test_tie_break_through_the_ledger(db, period, users):
    post_a, post_b = uuid.uuid4(), uuid.uuid4()
    LedgerService.apply_event(db, period.id, users[5], users[1], "share", "post", post_b, 1, now=at(1))
    LedgerService.apply_event(db, period.id, users[5], users[0], "share", "post", post_a, 1, now=at(2))

    entries = RankingService.refresh_ranking(db, period.id, now=at(3))

    assert [e.user_id for e in entries] == [users[1], users[0]]


def test_refresh_is_deterministic(db, period):
    users = [uuid.UUID(int=2000 + i) for i in range(30)]
    seed_totals(db, period.id, {user_id: float(i % 4) + 1.0 for i, user_id in enumerate(users)}, entered_at=at(5))

    first = snapshot(RankingService.refresh_ranking(db, period.id, now=at(10)))
    second = snapshot(RankingService.refresh_ranking(db, period.id, now=at(10)))

    assert first == second


def test_entries_carry_tiers(db, period):
    users = [uuid.UUID(int=3000 + i) for i in range(25)]
    seed_totals(db, period.id, {user_id: float(100 - i) for i, user_id in enumerate(users)})

    entries = RankingService.refresh_ranking(db, period.id, now=at(50))

    assert entries[0].tier == "Loki of Klicktape"
    assert entries[10].tier == "Odin of Klicktape"
    assert entries[24].tier == "Poseidon of Klicktape"


def test_refresh_replaces_the_whole_snapshot(db, period, users):
    seed_totals(db, period.id, {users[0]: 5.0, users[1]: 4.0, users[2]: 3.0})
    RankingService.refresh_ranking(db, period.id, now=at(10))

    # users[1] drops to zero; they must not linger at a stale position
    row = db.query(UserPointTotal).filter(UserPointTotal.user_id == users[1]).one()
    row.total_points = 0.0
    db.commit()

    entries = RankingService.refresh_ranking(db, period.id, now=at(11))

    assert [(e.user_id, e.rank_position) for e in entries] == [(users[0], 1), (users[2], 2)]
    assert db.query(LeaderboardRanking).filter(LeaderboardRanking.period_id == period.id).count() == 2


def test_zero_point_users_are_not_ranked(db, period, users):
    seed_totals(db, period.id, {users[0]: 0.0, users[1]: 2.0})

    entries = RankingService.refresh_ranking(db, period.id, now=at(10))

    assert [e.user_id for e in entries] == [users[1]]


def test_refresh_publishes_profile_tiers(db, period, users):
    seed_totals(db, period.id, {users[0]: 5.0, users[1]: 4.0})
    RankingService.refresh_ranking(db, period.id, now=at(10))

    profile = db.query(Profile).filter(Profile.id == users[0]).one()
    assert profile.current_tier == "Loki of Klicktape"

    db.query(UserPointTotal).filter(UserPointTotal.user_id == users[0]).update({"total_points": 0.0})
    db.commit()
    RankingService.refresh_ranking(db, period.id, now=at(11))

    db.expire_all()
    assert db.query(Profile).filter(Profile.id == users[0]).one().current_tier is None
    assert db.query(Profile).filter(Profile.id == users[1]).one().current_tier == "Loki of Klicktape"


def test_unknown_period_raises(db):
    with pytest.raises(LeaderboardError):
        RankingService.refresh_ranking(db, uuid.uuid4())


def test_withdrawn_like_does_not_cost_the_earlier_entrant_a_tie(db, period, users):
    x, y, fan = users[0], users[1], users[2]
    x_post = uuid.uuid4()
    LedgerService.apply_event(db, period.id, fan, x, "comment", "reel", uuid.uuid4(), 1, now=at(1))
    LedgerService.apply_event(db, period.id, fan, y, "share", "post", uuid.uuid4(), 1, now=at(2))
    LedgerService.apply_event(db, period.id, fan, x, "like", "post", x_post, 1, now=at(3))
    LedgerService.apply_event(db, period.id, fan, x, "like", "post", x_post, -1, now=at(4))

    entries = RankingService.refresh_ranking(db, period.id, now=at(5))

    assert [(e.user_id, e.total_points) for e in entries] == [(x, 3.0), (y, 3.0)]
