"""
Keeps the denormalized ``profiles.current_tier`` badge in sync with the leaderboard.
"""
from typing import Dict, Optional
from datetime import datetime
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import and_
import logging

from database import dialect_insert
from models.profile import Profile

logger = logging.getLogger(__name__)


class ProfileTierService:
    """Service for publishing tiers onto user profiles."""

    @staticmethod
    def publish_tiers(db: Session, tiers: Dict[UUID, str], now: Optional[datetime] = None) -> int:
        """
        Overwrite the tier badge of every profile.

        Users in ``tiers`` get their tier; every other profile currently holding
        a tier is cleared to NULL. A pure overwrite, so re-running it is safe.
        Does not commit; callers run it inside their own transaction.

        Args:
            db: Database session
            tiers: Mapping of user_id -> tier label
            now: Timestamp for updated_at (defaults to now)

        Returns:
            Number of profiles that were cleared
        """
        if now is None:
            now = datetime.utcnow()

        if tiers:
            insert = dialect_insert(db)
            table = Profile.__table__
            stmt = insert(table).values([
                {"id": user_id, "current_tier": tier, "created_at": now, "updated_at": now}
                for user_id, tier in tiers.items()
            ])
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.id],
                set_={
                    "current_tier": stmt.excluded.current_tier,
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            db.execute(stmt)

        clear_filter = Profile.current_tier.isnot(None)
        if tiers:
            clear_filter = and_(clear_filter, Profile.id.notin_(list(tiers.keys())))

        cleared = db.query(Profile).filter(clear_filter).update(
            {Profile.current_tier: None, Profile.updated_at: now},
            synchronize_session=False
        )

        logger.info(f"Published {len(tiers)} profile tiers, cleared {cleared}")

        return cleared

    @staticmethod
    def get_current_tier(db: Session, user_id: UUID) -> Optional[str]:
        profile = db.query(Profile).filter(Profile.id == user_id).first()
        return profile.current_tier if profile else None
