"""
Engagement ledger - records point-affecting events and keeps per-user totals in step with them.
"""
from typing import Optional
from datetime import datetime
from uuid import UUID
from sqlalchemy.orm import Session, aliased
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, and_
import logging

from database import dialect_insert
from models.engagement import EngagementEvent, UserPointTotal
from models.period import LeaderboardPeriod
from services.exceptions import NoActivePeriodError
from services.point_catalog import PointCatalog

logger = logging.getLogger(__name__)


class LedgerService:
    """Service for applying engagement events and reconciling point totals."""

    @staticmethod
    def apply_event(
        db: Session,
        period_id: UUID,
        actor_id: UUID,
        subject_user_id: UUID,
        action_type: str,
        content_type: str,
        content_id: UUID,
        sign: int,
        now: Optional[datetime] = None
    ) -> Optional[EngagementEvent]:
        """
        Apply (sign=+1) or reverse (sign=-1) one engagement.

        The event insert and the owner's total upsert commit together. Liking an
        already-liked item and reversing something that has no open event in the
        period are no-ops.

        Args:
            db: Database session
            period_id: Active period, resolved once per request by the caller
            actor_id: User performing the action
            subject_user_id: Owner of the content, who earns the points
            action_type: 'like', 'comment' or 'share'
            content_type: 'post', 'reel' or 'story'
            content_id: Content being engaged with
            sign: +1 to apply, -1 to reverse
            now: Event timestamp (defaults to now)

        Returns:
            The written EngagementEvent, or None if the call was a no-op

        Raises:
            NoActivePeriodError: If period_id is not the active period or ``now`` is
                past its end_time
            ValueError: If sign is not +1/-1 or the action is not in the catalog
        """
        if sign not in (1, -1):
            raise ValueError(f"sign must be +1 or -1, got {sign}")

        if now is None:
            now = datetime.utcnow()

        # Shared lock: rollover's completion update waits for in-flight writes
        period = db.query(LeaderboardPeriod).filter(
            LeaderboardPeriod.id == period_id
        ).with_for_update(read=True).first()
        if period is None or not period.is_active:
            db.rollback()
            raise NoActivePeriodError(
                f"Period {period_id} is not active; refusing to record {action_type} on {content_type} {content_id}",
                details={"period_id": str(period_id)},
            )
        if now < period.start_time or now >= period.end_time:
            db.rollback()
            raise NoActivePeriodError(
                f"Period {period_id} does not cover {now}; refusing to record {action_type} on {content_type} {content_id}",
                details={"period_id": str(period_id), "end_time": period.end_time.isoformat()},
            )

        points = PointCatalog.points_for(action_type, content_type)
        action_type = PointCatalog.normalize_action(action_type)
        content_type = PointCatalog.normalize_content(content_type)

        open_event = LedgerService._find_open_event(
            db, period_id, actor_id, action_type, content_type, content_id
        )

        if sign == 1:
            if open_event is not None and PointCatalog.is_like_class(action_type):
                logger.debug(f"Ignoring repeated {action_type} by {actor_id} on {content_id}")
                db.rollback()
                return None

            # Self-engagement is logged but never point-bearing
            points_delta = 0.0 if actor_id == subject_user_id else points
            event = EngagementEvent(
                user_id=actor_id,
                subject_user_id=subject_user_id,
                action_type=action_type,
                content_type=content_type,
                content_id=content_id,
                period_id=period_id,
                points_delta=points_delta,
                created_at=now,
            )
        else:
            if open_event is None:
                logger.info(
                    f"Nothing to reverse for {action_type} by {actor_id} on {content_type} {content_id} "
                    f"in period {period_id}"
                )
                db.rollback()
                return None

            event = EngagementEvent(
                user_id=open_event.user_id,
                subject_user_id=open_event.subject_user_id,
                action_type=action_type,
                content_type=content_type,
                content_id=content_id,
                period_id=period_id,
                points_delta=-open_event.points_delta if open_event.points_delta else 0.0,
                reverses_event_id=open_event.id,
                created_at=now,
            )

        try:
            db.add(event)
            db.flush()

            if event.points_delta != 0:
                LedgerService._increment_total(db, event.subject_user_id, period_id, event.points_delta, now)

            db.commit()
        except IntegrityError:
            # Another request reversed the same event first
            db.rollback()
            logger.warning(f"Concurrent reversal of {action_type} on {content_id} by {actor_id}; treating as no-op")
            return None

        db.refresh(event)

        logger.info(
            f"Applied {action_type}/{content_type} sign={sign:+d} actor={actor_id} "
            f"subject={event.subject_user_id} delta={event.points_delta} period={period_id}"
        )

        return event

    @staticmethod
    def _find_open_event(
        db: Session,
        period_id: UUID,
        actor_id: UUID,
        action_type: str,
        content_type: str,
        content_id: UUID
    ) -> Optional[EngagementEvent]:
        """Most recent matching event in the period that has not been reversed."""
        reversal = aliased(EngagementEvent)
        already_reversed = db.query(reversal.id).filter(
            reversal.reverses_event_id == EngagementEvent.id
        ).exists()

        return db.query(EngagementEvent).filter(
            and_(
                EngagementEvent.period_id == period_id,
                EngagementEvent.user_id == actor_id,
                EngagementEvent.action_type == action_type,
                EngagementEvent.content_type == content_type,
                EngagementEvent.content_id == content_id,
                EngagementEvent.reverses_event_id.is_(None),
                ~already_reversed
            )
        ).order_by(EngagementEvent.created_at.desc()).first()

    @staticmethod
    def _increment_total(db: Session, user_id: UUID, period_id: UUID, delta: float, now: datetime):
        """
        Atomically add ``delta`` to the user's total, creating the row if needed.

        ``entered_at`` is only written when the row is created.
        """
        insert = dialect_insert(db)
        table = UserPointTotal.__table__

        stmt = insert(table).values(
            user_id=user_id,
            period_id=period_id,
            total_points=delta,
            entered_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.user_id, table.c.period_id],
            set_={
                "total_points": table.c.total_points + stmt.excluded.total_points,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        db.execute(stmt)

    @staticmethod
    def compute_totals_from_events(db: Session, period_id: UUID):
        """
        Sum the event log per content owner for a period.

        Returns:
            Dict of user_id -> (total_points, entered_at), entered_at being the
            time of the first point-bearing event
        """
        rows = db.query(
            EngagementEvent.subject_user_id,
            func.sum(EngagementEvent.points_delta),
            func.min(EngagementEvent.created_at)
        ).filter(
            and_(
                EngagementEvent.period_id == period_id,
                EngagementEvent.points_delta != 0
            )
        ).group_by(EngagementEvent.subject_user_id).all()

        return {user_id: (float(total or 0.0), entered_at) for user_id, total, entered_at in rows}

    @staticmethod
    def reconcile_totals(db: Session, period_id: UUID, now: Optional[datetime] = None) -> int:
        """
        Recompute every user's total for a period from the event log.

        The period's total rows are locked before the log is summed, so an
        increment racing with reconciliation waits and lands on top of the
        reconciled value. Running it twice in a row changes nothing the second time.

        Args:
            db: Database session
            period_id: Period to reconcile
            now: Timestamp for updated_at (defaults to now)

        Returns:
            Number of total rows that were corrected
        """
        if now is None:
            now = datetime.utcnow()

        cached = {
            total.user_id: total
            for total in db.query(UserPointTotal).filter(
                UserPointTotal.period_id == period_id
            ).with_for_update().all()
        }
        expected = LedgerService.compute_totals_from_events(db, period_id)

        corrected = 0

        for user_id, (total_points, entered_at) in expected.items():
            row = cached.get(user_id)
            if row is None:
                db.add(UserPointTotal(
                    user_id=user_id,
                    period_id=period_id,
                    total_points=total_points,
                    entered_at=entered_at,
                    updated_at=now,
                ))
                corrected += 1
                logger.warning(f"Drift: missing total for user {user_id} in period {period_id}, restored {total_points}")
            elif row.total_points != total_points or row.entered_at != entered_at:
                logger.warning(
                    f"Drift: user {user_id} period {period_id} cached={row.total_points} "
                    f"ledger={total_points}; overwriting"
                )
                row.total_points = total_points
                row.entered_at = entered_at
                row.updated_at = now
                corrected += 1

        # Totals with no point-bearing events behind them
        for user_id, row in cached.items():
            if user_id not in expected and row.total_points != 0:
                logger.warning(f"Drift: orphan total {row.total_points} for user {user_id} in period {period_id}; zeroing")
                row.total_points = 0.0
                row.updated_at = now
                corrected += 1

        db.commit()

        logger.info(f"Reconciled point totals for period {period_id}: {corrected} corrected")

        return corrected
