"""
Booking lifecycle: create, cancel, rate, list.

Every precondition is checked before the first write, and each operation
ends in exactly one commit, so a failed call leaves nothing behind.
"""
import logging
import math
import re
import uuid
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from gymbook.core.clock import Clock
from gymbook.core.config import settings
from gymbook.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    TemporalPolicyError,
    ValidationError,
)
from gymbook.models.booking import Booking, BookingStatus
from gymbook.models.gym import Gym, GymStatus
from gymbook.models.user import User
from gymbook.services import ratings
from gymbook.utils.money import parse_amount
from gymbook.utils.schedule import is_slot_available, parse_hhmm

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4}$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_display_date(value) -> Optional[date]:
    """Strict DD/MM/YYYY, the format customers send and receive."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value.strip()):
        return None
    try:
        return datetime.strptime(value.strip(), "%d/%m/%Y").date()
    except ValueError:
        return None


def as_whole_number(value) -> Optional[int]:
    """`value` as an int when it is a finite whole number (bools excluded), else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
        return None
    return int(value)


def booking_start(booking: Booking) -> datetime:
    minutes = parse_hhmm(booking.from_time)
    return datetime.combine(booking.date, time(minutes // 60, minutes % 60))


def as_uuid(value, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {field}", field=field)


def load_booking_for_update(db: Session, booking_id) -> Booking:
    booking = (
        db.query(Booking)
        .filter(Booking.id == as_uuid(booking_id, "booking_id"))
        .with_for_update()
        .first()
    )
    if not booking:
        raise NotFoundError("Booking not found", field="booking_id")
    return booking


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def create_booking(
    db: Session,
    clock: Clock,
    customer: User,
    gym_id,
    date,
    from_time,
    to_time,
    total_price,
) -> Booking:
    """
    Reserve [from_time, to_time) at a gym on `date` (DD/MM/YYYY).

    Checks run in a fixed order and the first failure wins: profile
    completeness, required fields, formats, price, not in the past,
    time order, gym active, schedule fit, and no overlap with the
    customer's other bookings that day.
    """
    if not customer.has_contact_details:
        raise ValidationError("User profile incomplete: name and phone are required", field="profile")

    provided = (
        ("gym_id", gym_id),
        ("date", date),
        ("from", from_time),
        ("to", to_time),
        ("total_price", total_price),
    )
    missing = [name for name, value in provided if value is None or value == ""]
    if missing:
        raise ValidationError("All the fields are required.", field=missing[0], details=missing)

    day = parse_display_date(date)
    if day is None:
        raise ValidationError("Invalid date format. Use DD/MM/YYYY.", field="date")

    start, end = parse_hhmm(from_time), parse_hhmm(to_time)
    if start is None:
        raise ValidationError("Invalid time format. Use HH:MM.", field="from")
    if end is None:
        raise ValidationError("Invalid time format. Use HH:MM.", field="to")

    price = parse_amount(total_price)
    if price is None:
        raise ValidationError("Total price must be a non-negative number.", field="total_price")

    if datetime.combine(day, time(start // 60, start % 60)) < clock.now():
        raise TemporalPolicyError("Sorry, you can't book a session in the past.", field="from")

    if end <= start:
        raise ValidationError("End time must be after start time.", field="to")

    gym = db.query(Gym).filter(Gym.id == as_uuid(gym_id, "gym_id")).first()
    if not gym:
        raise NotFoundError("Gym not found.", field="gym_id")
    if gym.status != GymStatus.ACTIVE:
        raise ConflictError("Gym is not active. Cannot make bookings.", field="gym_id")

    if not is_slot_available(gym, day, from_time, to_time):
        raise ConflictError("No available slots for the given time.", field="from")

    # Serialise overlap-check-then-insert per customer
    db.query(User).filter(User.id == customer.id).with_for_update().one()

    overlapping = (
        db.query(Booking)
        .filter(
            Booking.user_id == customer.id,
            Booking.date == day,
            Booking.status != BookingStatus.CANCELLED,
            Booking.from_time <= to_time,
            Booking.to_time >= from_time,
        )
        .first()
    )
    if overlapping:
        db.rollback()
        raise ConflictError(
            f"You have an existing booking that overlaps ({overlapping.from_time} - {overlapping.to_time}).",
            field="from",
        )

    booking = Booking(
        user_id=customer.id,
        gym_id=gym.id,
        date=day,
        from_time=from_time,
        to_time=to_time,
        total_price=price,
        status=BookingStatus.SCHEDULED,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)

    logger.info("Booking %s created for gym %s on %s %s-%s", booking.id, gym.id, day, from_time, to_time)
    return booking


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------


def cancel_booking(db: Session, clock: Clock, customer: User, booking_id) -> Booking:
    booking = load_booking_for_update(db, booking_id)

    if booking.user_id != customer.id:
        raise AuthorizationError("You can only cancel your own bookings")

    if booking.status == BookingStatus.CANCELLED:
        raise ConflictError("Your booking has already been cancelled.", field="status")
    if booking.status == BookingStatus.COMPLETED:
        raise ConflictError("The booking is completed and cannot be cancelled.", field="status")

    now = clock.now()
    start = booking_start(booking)
    if start < now:
        raise TemporalPolicyError("Cannot cancel a past booking")

    cutoff = start - timedelta(minutes=settings.CANCELLATION_CUTOFF_MINUTES)
    if not now < cutoff:
        raise TemporalPolicyError(
            f"Cannot cancel a booking less than {settings.CANCELLATION_CUTOFF_MINUTES} "
            "minutes before the start time"
        )

    booking.status = BookingStatus.CANCELLED
    booking.cancelled_at = now
    db.commit()
    db.refresh(booking)

    logger.info("Booking %s cancelled by customer %s", booking.id, customer.id)
    return booking


# ---------------------------------------------------------------------------
# Rate
# ---------------------------------------------------------------------------


def rate_booking(db: Session, customer: User, booking_id, rating) -> Tuple[Booking, Gym, bool]:
    """
    Set or overwrite the customer's 1-5 rating on a booking and fold it into
    the gym's running average. Returns (booking, gym, created).

    Both the first rating and an overwrite are compare-and-set on the value
    read here; losing a race raises ConflictError instead of double counting.
    """
    rating = as_whole_number(rating)
    if rating is None or not 1 <= rating <= 5:
        raise ValidationError("Rating must be a whole number between 1 and 5", field="rating")

    booking = db.query(Booking).filter(Booking.id == as_uuid(booking_id, "booking_id")).first()
    if not booking:
        raise NotFoundError("Booking not found", field="booking_id")
    if booking.user_id != customer.id:
        raise AuthorizationError("You can only rate your own bookings")

    gym = db.query(Gym).filter(Gym.id == booking.gym_id).first()
    if not gym:
        raise NotFoundError("Gym not found", field="gym_id")

    previous = booking.rating
    if previous is None:
        claimed = db.query(Booking).filter(
            Booking.id == booking.id,
            Booking.rating.is_(None),
        ).update({Booking.rating: rating}, synchronize_session="fetch")
        if not claimed:
            db.rollback()
            raise ConflictError("Booking has already been rated", field="rating")
        ratings.add_rating(db, gym.id, rating)
    else:
        claimed = db.query(Booking).filter(
            Booking.id == booking.id,
            Booking.rating == previous,
        ).update({Booking.rating: rating}, synchronize_session="fetch")
        if not claimed:
            db.rollback()
            raise ConflictError("Rating changed concurrently, please retry", field="rating")
        ratings.update_rating(db, gym.id, previous, rating)

    db.commit()
    db.refresh(booking)
    db.refresh(gym)
    return booking, gym, previous is None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def list_customer_bookings(db: Session, customer: User) -> List[Booking]:
    """Non-cancelled bookings, earliest first."""
    return (
        db.query(Booking)
        .options(joinedload(Booking.gym))
        .filter(
            Booking.user_id == customer.id,
            Booking.status != BookingStatus.CANCELLED,
        )
        .order_by(Booking.date.asc(), Booking.from_time.asc())
        .all()
    )


def list_customer_bookings_on(
    db: Session, customer: User, day: date, page: int, limit: int
) -> Tuple[List[Booking], int]:
    """One page of the customer's non-cancelled bookings on `day`, with the total count."""
    query = db.query(Booking).filter(
        Booking.user_id == customer.id,
        Booking.date == day,
        Booking.status != BookingStatus.CANCELLED,
    )
    total = query.count()
    rows = (
        query.options(joinedload(Booking.gym))
        .order_by(Booking.from_time.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def list_upcoming_gym_bookings(db: Session, clock: Clock, gym: Gym) -> List[Booking]:
    """Bookings at `gym` dated today or later, in slot order."""
    return (
        db.query(Booking)
        .options(joinedload(Booking.user))
        .filter(
            Booking.gym_id == gym.id,
            Booking.date >= clock.today(),
        )
        .order_by(Booking.date.asc(), Booking.from_time.asc(), Booking.to_time.asc())
        .all()
    )
