import uuid
import enum
from sqlalchemy import (
    Column, String, Boolean, DateTime, func, DECIMAL, Integer, ForeignKey, Date, Uuid,
    Enum as SAEnum,
)
from sqlalchemy.orm import relationship
from gymbook.db.session import Base
from gymbook.models.user import enum_values


class BookingStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    PENDING = "pending"       # extended, awaiting the completion sweep
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    gym_id = Column(Uuid(as_uuid=True), ForeignKey("gyms.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    from_time = Column(String(5), nullable=False)  # "HH:MM"
    to_time = Column(String(5), nullable=False)
    total_price = Column(DECIMAL(10, 2), nullable=False)
    status = Column(
        SAEnum(BookingStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=BookingStatus.SCHEDULED,
        index=True,
    )
    # True only while an extension request waits for the owner's answer
    has_active_extension = Column(Boolean, nullable=False, default=False)
    rating = Column(Integer, nullable=True)  # 1-5
    extension_id = Column(Uuid(as_uuid=True), ForeignKey("extensions.id", use_alter=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="bookings")
    gym = relationship("Gym", back_populates="bookings")
    extension = relationship("Extension", foreign_keys=[extension_id], post_update=True)
