from typing import Dict, Generic, List, Literal, Optional, TypeVar
from pydantic import BaseModel, Field, HttpUrl, UUID4
from decimal import Decimal
from datetime import date, datetime

from gymbook.models.gym import GymStatus, ScheduleFrequency

NAME_PATTERN = r"^[A-Za-z][A-Za-z\s]*$"
ADDRESS_PATTERN = r"^[0-9a-zA-Z\s,.'-]+$"


class Interval(BaseModel):
    from_: str = Field(alias="from")
    to: str

    class Config:
        populate_by_name = True


# Schedule: replace (PUT /owner/gym/schedule)
class ScheduleUpdate(BaseModel):
    frequency: ScheduleFrequency = ScheduleFrequency.WEEKLY
    slots: Dict[str, List[Interval]]


class Schedule(BaseModel):
    frequency: ScheduleFrequency
    slots: Dict[str, List[Interval]] = {}


# Gym onboarding (POST /owner/gym)
class GymCreate(BaseModel):
    full_name: str = Field(pattern=NAME_PATTERN)
    contact_info: str = Field(pattern=r"^\d{10}$")
    gym_name: str = Field(pattern=NAME_PATTERN)
    upi_id: str = Field(pattern=r"^[0-9A-Za-z.\-_]+@[0-9A-Za-z]+$")
    gst_number: str = Field(pattern=r"^[0-9A-Za-z]+$")
    price: Decimal = Field(gt=0, decimal_places=2)
    description: Optional[str] = None
    address_line_1: str = Field(pattern=ADDRESS_PATTERN)
    address_line_2: Optional[str] = Field(None, pattern=ADDRESS_PATTERN)
    city: str = Field(pattern=NAME_PATTERN)
    state: str = Field(pattern=NAME_PATTERN)
    pincode: str = Field(pattern=r"^\d{6}$")
    google_maps_link: HttpUrl
    facilities: List[str] = []
    max_occupants: int = Field(gt=0)
    agreement: bool


# Gym update / resubmit (PATCH /owner/gym, PATCH /owner/gym/resubmit)
class GymUpdate(BaseModel):
    full_name: Optional[str] = Field(None, pattern=NAME_PATTERN)
    contact_info: Optional[str] = Field(None, pattern=r"^\d{10}$")
    gym_name: Optional[str] = Field(None, pattern=NAME_PATTERN)
    upi_id: Optional[str] = Field(None, pattern=r"^[0-9A-Za-z.\-_]+@[0-9A-Za-z]+$")
    gst_number: Optional[str] = Field(None, pattern=r"^[0-9A-Za-z]+$")
    price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    description: Optional[str] = None
    address_line_1: Optional[str] = Field(None, pattern=ADDRESS_PATTERN)
    address_line_2: Optional[str] = Field(None, pattern=ADDRESS_PATTERN)
    city: Optional[str] = Field(None, pattern=NAME_PATTERN)
    state: Optional[str] = Field(None, pattern=NAME_PATTERN)
    pincode: Optional[str] = Field(None, pattern=r"^\d{6}$")
    google_maps_link: Optional[HttpUrl] = None
    facilities: Optional[List[str]] = None
    max_occupants: Optional[int] = Field(None, gt=0)


class Gym(BaseModel):
    id: UUID4
    owner_id: UUID4
    gym_name: str
    address_line_1: str
    address_line_2: Optional[str] = None
    city: str
    state: str
    pincode: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    description: Optional[str] = None
    images: List[str] = []
    facilities: List[str] = []
    price: Decimal
    schedule: Optional[Schedule] = None
    average_rating: float = 0.0
    total_ratings: int = 0
    total_occupancy: int
    status: GymStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Compact gym card for discovery (GET /gyms)
class GymListItem(BaseModel):
    id: UUID4
    gym_name: str
    city: str
    price: Decimal
    images: List[str] = []
    average_rating: float = 0.0
    description: Optional[str] = None

    class Config:
        from_attributes = True


class PendingGymOwner(BaseModel):
    full_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    upi_id: Optional[str] = None

    class Config:
        from_attributes = True


# Admin review queue item (GET /admin/gyms/pending)
class PendingGym(BaseModel):
    id: UUID4
    gym_name: str
    address_line_1: str
    address_line_2: Optional[str] = None
    city: str
    state: str
    pincode: str
    gst_number: str
    images: List[str] = []
    total_occupancy: int
    req_creation_date: Optional[datetime] = None
    owner: Optional[PendingGymOwner] = None

    class Config:
        from_attributes = True


class GymReviewDecision(BaseModel):
    status: Literal["approve", "reject"]
    reason: Optional[str] = None


class GymStatusResponse(BaseModel):
    gym_id: UUID4
    status: GymStatus


class GymRatingSummary(BaseModel):
    gym_id: UUID4
    average_rating: float
    total_ratings: int


class AvailabilityResponse(BaseModel):
    gym_id: UUID4
    date: str
    from_: str = Field(serialization_alias="from")
    to: str
    available: bool


# City that has at least one live gym (GET /gyms/cities)
class GymCity(BaseModel):
    city: str
    state: str


N = TypeVar("N")


class WeeklyStat(BaseModel, Generic[N]):
    current: N
    previous: N
    growth_percentage: float


# Owner dashboard (GET /owner/gym/stats): this week (Mon-Sun) against last week
class GymStats(BaseModel):
    week_start: date
    week_end: date
    total_bookings: WeeklyStat[int]
    total_revenue: WeeklyStat[Decimal]
    total_hours: WeeklyStat[float]
    total_unique_users: WeeklyStat[int]
