from uuid import UUID
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from gymbook.db.session import get_db
from gymbook.core.exceptions import ValidationError
from gymbook.models.gym import Gym, GymStatus
from gymbook.schemas.gym import Gym as GymSchema, GymCity, GymListItem, AvailabilityResponse
from gymbook.schemas.common import PaginatedResponse
from gymbook.services.bookings import parse_display_date
from gymbook.utils.schedule import is_slot_available, parse_hhmm

router = APIRouter(prefix="/gyms", tags=["Gyms"])

SORT_COLUMNS = {
    "price": Gym.price,
    "rating": Gym.average_rating,
}


def _get_active_gym(gym_id: UUID, db: Session) -> Gym:
    gym = db.query(Gym).filter(Gym.id == gym_id, Gym.status == GymStatus.ACTIVE).first()
    if not gym:
        raise HTTPException(status_code=404, detail="Gym not found")
    return gym


@router.get("/", response_model=PaginatedResponse[GymListItem])
def list_gyms(
    city: Optional[str] = Query(None, description="Case-insensitive city filter"),
    sort_by: Optional[Literal["price", "rating"]] = Query(None),
    order_by: Literal["asc", "desc"] = Query("asc"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Active gyms, optionally filtered by city and sorted by price or rating."""
    query = db.query(Gym).filter(Gym.status == GymStatus.ACTIVE)
    if city:
        query = query.filter(func.lower(Gym.city) == city.strip().lower())

    if sort_by:
        column = SORT_COLUMNS[sort_by]
        query = query.order_by(column.desc() if order_by == "desc" else column.asc(), Gym.gym_name.asc())
    else:
        query = query.order_by(Gym.gym_name.asc())

    total = query.count()
    gyms = query.offset((page - 1) * limit).limit(limit).all()

    return PaginatedResponse(
        data=[GymListItem.model_validate(g) for g in gyms],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.get("/cities", response_model=List[GymCity])
def list_gym_cities(db: Session = Depends(get_db)):
    """Distinct city/state pairs that have at least one active gym."""
    rows = (
        db.query(Gym.city, Gym.state)
        .filter(Gym.status == GymStatus.ACTIVE)
        .distinct()
        .order_by(Gym.city.asc(), Gym.state.asc())
        .all()
    )
    return [GymCity(city=city, state=state) for city, state in rows]


@router.get("/{gym_id}", response_model=GymSchema)
def get_gym(gym_id: UUID, db: Session = Depends(get_db)):
    return _get_active_gym(gym_id, db)


@router.get("/{gym_id}/availability", response_model=AvailabilityResponse)
def check_availability(
    gym_id: UUID,
    date: str = Query(..., description="DD/MM/YYYY"),
    from_: str = Query(..., alias="from", description="HH:MM"),
    to: str = Query(..., description="HH:MM"),
    db: Session = Depends(get_db),
):
    """Whether [from, to) fits entirely inside one of the gym's open intervals that weekday."""
    gym = _get_active_gym(gym_id, db)

    day = parse_display_date(date)
    if day is None:
        raise ValidationError("Invalid date format. Use DD/MM/YYYY.", field="date")
    if parse_hhmm(from_) is None:
        raise ValidationError("Invalid time format. Use HH:MM.", field="from")
    if parse_hhmm(to) is None:
        raise ValidationError("Invalid time format. Use HH:MM.", field="to")

    return AvailabilityResponse(
        gym_id=gym.id,
        date=date,
        from_=from_,
        to=to,
        available=is_slot_available(gym, day, from_, to),
    )
