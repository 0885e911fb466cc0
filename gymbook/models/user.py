import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, func, Uuid, Enum as SAEnum
from sqlalchemy.orm import relationship
from gymbook.db.session import Base


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    OWNER = "owner"
    ADMIN = "admin"
    MODERATOR = "moderator"


def enum_values(enum_cls):
    """Persist enum values ("customer"), not member names ("CUSTOMER")."""
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    upi_id = Column(String(100), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    role = Column(
        SAEnum(UserRole, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=UserRole.CUSTOMER,
    )
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    gym = relationship("Gym", back_populates="owner", uselist=False)
    bookings = relationship("Booking", back_populates="user")

    @property
    def has_contact_details(self) -> bool:
        return bool(self.full_name and self.phone)
