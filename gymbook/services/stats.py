"""
Owner dashboard figures: the current week against the one before.

Weeks run Monday to Sunday around the clock's today. Cancelled bookings are
not counted.
"""
from datetime import date, timedelta
from typing import Tuple

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from gymbook.core.clock import Clock
from gymbook.models.booking import Booking, BookingStatus
from gymbook.models.gym import Gym
from gymbook.schemas.gym import GymStats
from gymbook.utils.money import round_money
from gymbook.utils.schedule import parse_hhmm


def week_bounds(day: date) -> Tuple[date, date]:
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def growth_percentage(current, previous) -> float:
    """Change from `previous` to `current` in percent; 100 when starting from zero."""
    current, previous = float(current), float(previous)
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 2)


def _week_totals(db: Session, gym_id, start: date, end: date) -> dict:
    window = (
        Booking.gym_id == gym_id,
        Booking.date >= start,
        Booking.date <= end,
        Booking.status != BookingStatus.CANCELLED,
    )
    bookings, revenue, customers = (
        db.query(
            func.count(Booking.id),
            func.coalesce(func.sum(Booking.total_price), 0),
            func.count(distinct(Booking.user_id)),
        )
        .filter(*window)
        .one()
    )

    minutes = 0
    for from_time, to_time in db.query(Booking.from_time, Booking.to_time).filter(*window):
        minutes += parse_hhmm(to_time) - parse_hhmm(from_time)

    return {
        "bookings": bookings,
        "revenue": round_money(revenue),
        "hours": round(minutes / 60, 2),
        "customers": customers,
    }


def gym_stats(db: Session, clock: Clock, gym: Gym) -> GymStats:
    start, end = week_bounds(clock.today())
    current = _week_totals(db, gym.id, start, end)
    previous = _week_totals(db, gym.id, start - timedelta(days=7), start - timedelta(days=1))

    def stat(key):
        return {
            "current": current[key],
            "previous": previous[key],
            "growth_percentage": growth_percentage(current[key], previous[key]),
        }

    return GymStats(
        week_start=start,
        week_end=end,
        total_bookings=stat("bookings"),
        total_revenue=stat("revenue"),
        total_hours=stat("hours"),
        total_unique_users=stat("customers"),
    )
