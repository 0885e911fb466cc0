from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from gymbook.db.session import get_db
from gymbook.api.deps import get_current_customer
from gymbook.core.clock import Clock, get_clock
from gymbook.core.exceptions import ValidationError
from gymbook.models.user import User
from gymbook.services import bookings as booking_service
from gymbook.services import extensions as extension_service
from gymbook.schemas.booking import (
    BookingCreate,
    Booking as BookingSchema,
    BookingGymImages,
    BookingListItem,
    RatingRequest,
    RatingResponse,
)
from gymbook.schemas.extension import ExtensionCreate, Extension as ExtensionSchema
from gymbook.schemas.common import ErrorResponse, PaginatedResponse

ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 403, 404, 409)}

router = APIRouter(prefix="/bookings", tags=["Bookings"], responses=ERROR_RESPONSES)


# ---------------------------------------------------------------------------
# Create & list
# ---------------------------------------------------------------------------


@router.post("/", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_customer),
):
    return booking_service.create_booking(
        db,
        clock,
        current_user,
        gym_id=data.gym_id,
        date=data.date,
        from_time=data.from_,
        to_time=data.to,
        total_price=data.total_price,
    )


@router.get("/", response_model=List[BookingListItem])
def list_my_bookings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_customer),
):
    """The caller's non-cancelled bookings, earliest first."""
    return [
        BookingListItem(
            id=b.id,
            gym_id=b.gym_id,
            gym=b.gym.gym_name,
            date=b.date,
            from_time=b.from_time,
            to_time=b.to_time,
            price=b.total_price,
            status=b.status,
            rating=b.rating,
            has_active_extension=b.has_active_extension,
        )
        for b in booking_service.list_customer_bookings(db, current_user)
    ]


@router.get("/images", response_model=PaginatedResponse[BookingGymImages])
def list_booking_images_on(
    date: str = Query(..., description="DD/MM/YYYY"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_customer),
):
    """The caller's bookings on one day, each with its gym's photos."""
    day = booking_service.parse_display_date(date)
    if day is None:
        raise ValidationError("Invalid date format. Use DD/MM/YYYY.", field="date")

    rows, total = booking_service.list_customer_bookings_on(db, current_user, day, page, limit)

    return PaginatedResponse(
        data=[
            BookingGymImages(
                booking_id=b.id,
                gym_id=b.gym_id,
                gym_name=b.gym.gym_name,
                date=b.date,
                from_time=b.from_time,
                to_time=b.to_time,
                image_urls=list(b.gym.images or []),
            )
            for b in rows
        ],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------


@router.patch("/{booking_id}/cancel", response_model=BookingSchema)
def cancel_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_customer),
):
    return booking_service.cancel_booking(db, clock, current_user, booking_id)


# ---------------------------------------------------------------------------
# Extensions & rating
# ---------------------------------------------------------------------------


@router.post("/{booking_id}/extensions", response_model=ExtensionSchema, status_code=status.HTTP_201_CREATED)
def request_extension(
    booking_id: UUID,
    data: ExtensionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_customer),
):
    return extension_service.request_extension(db, current_user, booking_id, data.duration)


@router.patch("/{booking_id}/rating", response_model=RatingResponse)
def rate_booking(
    booking_id: UUID,
    data: RatingRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_customer),
):
    booking, gym, created = booking_service.rate_booking(db, current_user, booking_id, data.rating)
    return RatingResponse(
        booking_id=booking.id,
        rating=booking.rating,
        created=created,
        average_rating=gym.average_rating,
        total_ratings=gym.total_ratings,
    )
