import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from gymbook.core.clock import Clock
from gymbook.core.config import settings
from gymbook.models.booking import Booking, BookingStatus
from gymbook.models.extension import Extension, ExtensionStatus

logger = logging.getLogger(__name__)


def _ended_before(instant: datetime):
    """
    A booking has ended before `instant` when:
      - date  < instant.date()                               (earlier day), or
      - date == instant.date()  AND  to_time < instant HH:MM (ended today)

    `to_time` is zero-padded "HH:MM", so string order is time order.
    """
    day = instant.date()
    current = instant.strftime("%H:%M")
    return or_(
        Booking.date < day,
        and_(Booking.date == day, Booking.to_time < current),
    )


def _apply_in_batches(db: Session, ids: List, apply: Callable[[Session, List], int], label: str) -> int:
    """
    Run `apply` over `ids` in chunks of SWEEP_BATCH_SIZE, committing each.
    A chunk that fails is rolled back and retried one record at a time, so a
    single bad record is logged and skipped instead of halting the sweep.
    """
    size = max(settings.SWEEP_BATCH_SIZE, 1)
    total = 0
    for offset in range(0, len(ids), size):
        chunk = ids[offset:offset + size]
        try:
            total += apply(db, chunk)
            db.commit()
        except Exception:
            db.rollback()
            logger.warning("%s: batch of %d failed, retrying per record.", label, len(chunk))
            for record_id in chunk:
                try:
                    total += apply(db, [record_id])
                    db.commit()
                except Exception:
                    db.rollback()
                    logger.exception("%s: failed on record %s.", label, record_id)
    return total


def run_completion_sweep(db: Session, clock: Clock, include_scheduled: Optional[bool] = None) -> int:
    """
    Mark as completed every booking whose end time has already passed.

    By default both `scheduled` and `pending` bookings are swept. With
    COMPLETION_SWEEP_INCLUDES_SCHEDULED off only `pending` ones are, which is
    the older behaviour where a never-extended booking stays `scheduled`.

    Idempotent: completed and cancelled rows never match the filter.
    Returns the number of bookings completed.
    """
    if include_scheduled is None:
        include_scheduled = settings.COMPLETION_SWEEP_INCLUDES_SCHEDULED

    statuses = [BookingStatus.PENDING]
    if include_scheduled:
        statuses.append(BookingStatus.SCHEDULED)

    now = clock.now()
    ids = [
        row.id
        for row in db.query(Booking.id)
        .filter(Booking.status.in_(statuses), _ended_before(now))
        .order_by(Booking.date.asc())
        .all()
    ]
    if not ids:
        return 0

    def complete(session: Session, chunk: List) -> int:
        return (
            session.query(Booking)
            .filter(Booking.id.in_(chunk), Booking.status.in_(statuses))
            .update(
                {"status": BookingStatus.COMPLETED, "completed_at": now},
                synchronize_session=False,
            )
        )

    return _apply_in_batches(db, ids, complete, "completion sweep")


def run_extension_expiry_sweep(db: Session, clock: Clock) -> int:
    """
    Cancel extension requests still pending EXTENSION_EXPIRY_MINUTES after the
    booking's end time, and clear the booking's active-extension flag.

    Returns the number of extensions cancelled.
    """
    threshold = clock.now() - timedelta(minutes=settings.EXTENSION_EXPIRY_MINUTES)
    ids = [
        row.id
        for row in db.query(Extension.id)
        .join(Booking, Booking.id == Extension.booking_id)
        .filter(Extension.status == ExtensionStatus.PENDING, _ended_before(threshold))
        .all()
    ]
    if not ids:
        return 0

    def expire(session: Session, chunk: List) -> int:
        count = (
            session.query(Extension)
            .filter(Extension.id.in_(chunk), Extension.status == ExtensionStatus.PENDING)
            .update({"status": ExtensionStatus.CANCELLED}, synchronize_session=False)
        )
        booking_ids = [row.booking_id for row in session.query(Extension.booking_id).filter(Extension.id.in_(chunk))]
        session.query(Booking).filter(Booking.id.in_(booking_ids)).update(
            {"has_active_extension": False},
            synchronize_session=False,
        )
        return count

    return _apply_in_batches(db, ids, expire, "extension expiry sweep")


def run_sweeps(db: Session, clock: Clock) -> dict:
    """One tick of the background loop: completion first, then expiry."""
    completed = run_completion_sweep(db, clock)
    expired = run_extension_expiry_sweep(db, clock)
    return {"completed": completed, "expired_extensions": expired}
