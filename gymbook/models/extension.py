import uuid
import enum
from sqlalchemy import Column, DateTime, func, Integer, ForeignKey, Uuid, Enum as SAEnum
from sqlalchemy.orm import relationship
from gymbook.db.session import Base
from gymbook.models.user import enum_values


class ExtensionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CANCELLED = "cancelled"


class Extension(Base):
    __tablename__ = "extensions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # unique: a booking accepts at most one extension
    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id"), nullable=False, unique=True)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    duration = Column(Integer, nullable=False)  # minutes
    status = Column(
        SAEnum(ExtensionStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=ExtensionStatus.PENDING,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    booking = relationship("Booking", foreign_keys=[booking_id])
    owner = relationship("User")
