from typing import List, Optional, Union
from pydantic import BaseModel, Field, UUID4, field_serializer
from decimal import Decimal
from datetime import date, datetime

from gymbook.models.booking import BookingStatus

DISPLAY_DATE_FORMAT = "%d/%m/%Y"


# Booking: Create (POST /bookings). Fields are validated by the booking service.
class BookingCreate(BaseModel):
    gym_id: Optional[str] = None
    date: Optional[str] = None  # DD/MM/YYYY
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    total_price: Optional[Union[str, float, int]] = None

    class Config:
        populate_by_name = True


# Booking: Full response (POST /bookings, PATCH /bookings/{id}/cancel)
class Booking(BaseModel):
    id: UUID4
    user_id: UUID4
    gym_id: UUID4
    date: date
    from_time: str = Field(serialization_alias="from")
    to_time: str = Field(serialization_alias="to")
    total_price: Decimal
    status: BookingStatus
    has_active_extension: bool = False
    rating: Optional[int] = None
    extension_id: Optional[UUID4] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_serializer("date")
    def display_date(self, value: date) -> str:
        return value.strftime(DISPLAY_DATE_FORMAT)


# Customer booking list item (GET /bookings)
class BookingListItem(BaseModel):
    id: UUID4
    gym_id: UUID4
    gym: str
    date: date
    from_time: str = Field(serialization_alias="from")
    to_time: str = Field(serialization_alias="to")
    price: Decimal
    status: BookingStatus
    rating: Optional[int] = None
    has_active_extension: bool = False

    @field_serializer("date")
    def display_date(self, value: date) -> str:
        return value.strftime(DISPLAY_DATE_FORMAT)


# Owner dashboard row (GET /owner/bookings/upcoming)
class UpcomingBooking(BaseModel):
    booking_id: UUID4
    date: date
    customer: Optional[str] = None
    mobile: Optional[str] = None
    slot: str
    status: BookingStatus

    @field_serializer("date")
    def display_date(self, value: date) -> str:
        return value.strftime(DISPLAY_DATE_FORMAT)


# Rating (PATCH /bookings/{id}/rating)
class RatingRequest(BaseModel):
    rating: Union[int, float]


class RatingResponse(BaseModel):
    booking_id: UUID4
    rating: int
    created: bool
    average_rating: float
    total_ratings: int


# Customer's bookings on one day with the gym's photos (GET /bookings/images)
class BookingGymImages(BaseModel):
    booking_id: UUID4
    gym_id: UUID4
    gym_name: str
    date: date
    from_time: str = Field(serialization_alias="from")
    to_time: str = Field(serialization_alias="to")
    image_urls: List[str] = []

    @field_serializer("date")
    def display_date(self, value: date) -> str:
        return value.strftime(DISPLAY_DATE_FORMAT)
