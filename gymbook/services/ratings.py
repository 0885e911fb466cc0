"""
Running average of booking ratings per gym.

Each change is one UPDATE whose SET clause reads the row's current values,
so two raters can't lose each other's contribution. Nothing here commits;
the caller commits together with the booking's own rating write.
"""
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from gymbook.models.booking import Booking
from gymbook.models.gym import Gym

logger = logging.getLogger(__name__)


def add_rating(db: Session, gym_id, new_rating: int) -> None:
    """average = (average*total + new) / (total+1); total += 1"""
    db.query(Gym).filter(Gym.id == gym_id).update(
        {
            Gym.average_rating: (Gym.average_rating * Gym.total_ratings + new_rating)
            / (Gym.total_ratings + 1),
            Gym.total_ratings: Gym.total_ratings + 1,
        },
        synchronize_session="fetch",
    )


def update_rating(db: Session, gym_id, old_rating: int, new_rating: int) -> None:
    """average = (average*total - old + new) / total; total unchanged"""
    updated = db.query(Gym).filter(Gym.id == gym_id, Gym.total_ratings > 0).update(
        {
            Gym.average_rating: (Gym.average_rating * Gym.total_ratings - old_rating + new_rating)
            / Gym.total_ratings,
        },
        synchronize_session="fetch",
    )
    if not updated:
        # A rated booking with a zero count means the aggregate drifted
        logger.warning("Gym %s had no counted ratings during an update; recomputing.", gym_id)
        recompute_gym_rating(db, gym_id)


def recompute_gym_rating(db: Session, gym_id) -> None:
    """Rebuild the aggregate from the ratings currently stored on bookings."""
    average, count = (
        db.query(func.avg(Booking.rating), func.count(Booking.rating))
        .filter(Booking.gym_id == gym_id, Booking.rating.isnot(None))
        .one()
    )
    db.query(Gym).filter(Gym.id == gym_id).update(
        {
            Gym.average_rating: float(average or 0.0),
            Gym.total_ratings: count or 0,
        },
        synchronize_session="fetch",
    )
