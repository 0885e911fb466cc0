"""
Extension negotiation: a customer asks for extra minutes on a booking, the
gym owner approves or cancels it.

A booking carries at most one extension (unique `extensions.booking_id`).
`Booking.has_active_extension` is True only while a request is pending.
"""
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gymbook.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from gymbook.models.booking import Booking, BookingStatus, TERMINAL_STATUSES
from gymbook.models.extension import Extension, ExtensionStatus
from gymbook.models.gym import Gym
from gymbook.models.user import User
from gymbook.schemas.extension import OwnerPendingExtension
from gymbook.services.bookings import as_uuid, as_whole_number, load_booking_for_update
from gymbook.utils.money import prorated_price, round_money

logger = logging.getLogger(__name__)

DECISIONS = {
    "approved": ExtensionStatus.APPROVED,
    "cancelled": ExtensionStatus.CANCELLED,
}


def request_extension(db: Session, customer: User, booking_id, duration) -> Extension:
    duration = as_whole_number(duration)
    if duration is None:
        raise ValidationError("Extension duration must be a whole number of minutes", field="duration")
    if duration <= 0:
        raise ValidationError("Extension duration must be greater than zero", field="duration")

    booking = load_booking_for_update(db, booking_id)

    if booking.status not in (BookingStatus.SCHEDULED, BookingStatus.PENDING):
        raise ConflictError(f"Cannot extend a {booking.status.value} booking", field="status")
    if booking.user_id != customer.id:
        raise AuthorizationError("You can only extend your own bookings")
    if booking.extension_id is not None:
        raise ConflictError("An extension has already been requested for this booking", field="booking_id")

    gym = db.query(Gym).filter(Gym.id == booking.gym_id).first()
    if not gym:
        raise NotFoundError("Gym not found", field="gym_id")

    extension = Extension(
        booking_id=booking.id,
        owner_id=gym.owner_id,
        duration=duration,
        status=ExtensionStatus.PENDING,
    )
    db.add(extension)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("An extension has already been requested for this booking", field="booking_id")

    booking.extension_id = extension.id
    booking.has_active_extension = True
    db.commit()
    db.refresh(extension)

    logger.info("Extension %s (%d min) requested on booking %s", extension.id, duration, booking.id)
    return extension


def respond_to_extension(db: Session, owner: User, extension_id, decision) -> Extension:
    """
    Approve or cancel a pending extension.

    Approval adds duration * hourly price / 60 to the booking's total and
    moves a `scheduled` booking to `pending`. The booking's `to` time is not
    moved. The status change is a compare-and-set on `pending`, so two racing
    decisions cannot both apply.
    """
    new_status = DECISIONS.get(decision)
    if new_status is None:
        raise ValidationError("Status must be either 'approved' or 'cancelled'", field="status")

    extension = db.query(Extension).filter(Extension.id == as_uuid(extension_id, "extension_id")).first()
    if not extension:
        raise NotFoundError("Extension request not found", field="extension_id")
    if extension.owner_id != owner.id:
        raise AuthorizationError("You can only respond to extensions for your own gym")
    if extension.status != ExtensionStatus.PENDING:
        raise ConflictError(f"Extension has already been {extension.status.value}", field="status")

    booking = load_booking_for_update(db, extension.booking_id)
    if new_status == ExtensionStatus.APPROVED and booking.status in TERMINAL_STATUSES:
        raise ConflictError(f"Cannot extend a {booking.status.value} booking", field="status")

    claimed = db.query(Extension).filter(
        Extension.id == extension.id,
        Extension.status == ExtensionStatus.PENDING,
    ).update({Extension.status: new_status}, synchronize_session="fetch")
    if not claimed:
        db.rollback()
        raise ConflictError("Extension has already been resolved", field="status")

    if new_status == ExtensionStatus.APPROVED:
        gym = db.query(Gym).filter(Gym.id == booking.gym_id).one()
        booking.total_price = round_money(booking.total_price + prorated_price(extension.duration, gym.price))
        booking.extension_id = extension.id
        if booking.status == BookingStatus.SCHEDULED:
            booking.status = BookingStatus.PENDING

    booking.has_active_extension = False
    db.commit()
    db.refresh(extension)

    logger.info("Extension %s %s by owner %s", extension.id, new_status.value, owner.id)
    return extension


def list_owner_pending_extensions(db: Session, owner_id) -> List[OwnerPendingExtension]:
    rows = (
        db.query(Extension, Booking, User)
        .join(Booking, Booking.id == Extension.booking_id)
        .join(User, User.id == Booking.user_id)
        .filter(
            Extension.owner_id == owner_id,
            Extension.status == ExtensionStatus.PENDING,
        )
        .order_by(Booking.date.desc())
        .all()
    )
    return [
        OwnerPendingExtension(
            id=extension.id,
            booking_id=booking.id,
            customer=customer.full_name,
            mobile=customer.phone,
            date=booking.date,
            duration=extension.duration,
            status=extension.status,
        )
        for extension, booking, customer in rows
    ]
