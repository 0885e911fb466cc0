from typing import Literal, Optional, Union
from pydantic import BaseModel, UUID4, field_serializer
from datetime import date, datetime

from gymbook.models.extension import ExtensionStatus
from gymbook.schemas.booking import DISPLAY_DATE_FORMAT


# Extension: request (POST /bookings/{id}/extensions)
class ExtensionCreate(BaseModel):
    duration: Optional[Union[int, float]] = None  # minutes


# Extension: owner decision (PATCH /owner/extensions/{id})
class ExtensionDecision(BaseModel):
    status: Literal["approved", "cancelled"]


class Extension(BaseModel):
    id: UUID4
    booking_id: UUID4
    owner_id: UUID4
    duration: int
    status: ExtensionStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Owner's pending queue item (GET /owner/extensions)
class OwnerPendingExtension(BaseModel):
    id: UUID4
    booking_id: UUID4
    customer: Optional[str] = None
    mobile: Optional[str] = None
    date: date
    duration: int
    status: ExtensionStatus

    @field_serializer("date")
    def display_date(self, value: date) -> str:
        return value.strftime(DISPLAY_DATE_FORMAT)
