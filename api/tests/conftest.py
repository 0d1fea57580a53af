"""
Shared fixtures: an in-memory SQLite database per test and a FastAPI client bound to it.
"""
import os

# Must be set before config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LEADERBOARD_REFRESH_ON_WRITE"] = "false"

import uuid
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
import models  # noqa: F401
from models import UserPointTotal
from services.period_service import PeriodService

START = datetime(2026, 1, 5, 0, 0, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def period(db):
    """Active period starting at START."""
    return PeriodService.get_or_create_active_period(db, now=START)


@pytest.fixture
def users():
    """A handful of stable user ids."""
    return [uuid.UUID(int=i) for i in range(1, 11)]


@pytest.fixture
def client(session_factory):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def at(minutes: float) -> datetime:
    """Timestamp ``minutes`` after START."""
    return START + timedelta(minutes=minutes)


def seed_totals(db, period_id, points_by_user, entered_at=None):
    """Write point totals directly, bypassing the ledger."""
    for offset, (user_id, points) in enumerate(points_by_user.items()):
        db.add(UserPointTotal(
            user_id=user_id,
            period_id=period_id,
            total_points=points,
            entered_at=entered_at or at(offset),
            updated_at=at(offset),
        ))
    db.commit()
