"""
Database configuration and session management using SQLAlchemy 2.0.
"""
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker
from config import settings

logger = logging.getLogger(__name__)

if settings.DATABASE_URL.startswith("sqlite"):
    engine_kwargs = {"connect_args": {"check_same_thread": False}}
else:
    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": 5,
        "max_overflow": 10,
    }

# Create database engine
engine = create_engine(settings.DATABASE_URL, **engine_kwargs)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for SQLAlchemy models
Base = declarative_base()


def get_db():
    """
    Dependency for FastAPI to get database session.

    Usage:
        @app.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database tables (called during startup or migrations)."""
    # Import all models here to ensure they're registered
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


def dialect_insert(db: Session):
    """
    Return the dialect-specific ``insert`` construct for the session's backend.

    Both PostgreSQL and SQLite variants support ``on_conflict_do_update`` and
    ``on_conflict_do_nothing``, which the ledger and reward writers rely on.
    """
    dialect_name = db.get_bind().dialect.name
    if dialect_name == "postgresql":
        return postgresql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Upserts are not supported on dialect '{dialect_name}'")


def advisory_xact_lock(db: Session, key: str) -> None:
    """
    Take a transaction-scoped advisory lock keyed on ``key``.

    Released automatically on commit or rollback. SQLite serialises writers
    itself, so the call is a no-op there.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key})
