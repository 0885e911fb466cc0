import uuid
import enum
from sqlalchemy import (
    Column, String, DateTime, func, Text, DECIMAL, Integer, Float, ForeignKey, JSON, Uuid,
    Enum as SAEnum,
)
from sqlalchemy.orm import relationship
from gymbook.db.session import Base
from gymbook.models.user import enum_values


class GymStatus(str, enum.Enum):
    INACTIVE = "inactive"   # awaiting approval, or deactivated
    ACTIVE = "active"
    REJECTED = "rejected"


class ScheduleFrequency(str, enum.Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Gym(Base):
    __tablename__ = "gyms"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, unique=True, index=True)
    gym_name = Column(String(255), nullable=False)
    address_line_1 = Column(Text, nullable=False)
    address_line_2 = Column(Text, nullable=True)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=False)
    pincode = Column(String(10), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    images = Column(JSON, nullable=False, default=list)
    facilities = Column(JSON, nullable=False, default=list)
    gst_number = Column(String(20), nullable=False)
    price = Column(DECIMAL(10, 2), nullable=False)  # per hour
    # {"frequency": "weekly", "slots": {"Monday": [{"from": "06:00", "to": "08:00"}]}}
    schedule = Column(JSON, nullable=True)
    average_rating = Column(Float, nullable=False, default=0.0)
    total_ratings = Column(Integer, nullable=False, default=0)
    total_occupancy = Column(Integer, nullable=False)
    status = Column(
        SAEnum(GymStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=GymStatus.INACTIVE,
        index=True,
    )
    req_creation_date = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    owner = relationship("User", back_populates="gym")
    bookings = relationship("Booking", back_populates="gym")

    @property
    def slots(self) -> dict:
        return (self.schedule or {}).get("slots") or {}
