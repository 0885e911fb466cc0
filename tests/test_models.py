from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import inspect
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import configure_mappers
from sqlalchemy.schema import CreateTable

from gymbook.db.base import Base
from gymbook.models.booking import BookingStatus
from gymbook.models.extension import Extension
from gymbook.models.user import UserRole
from gymbook.schemas.booking import Booking as BookingSchema, BookingCreate
from gymbook.schemas.gym import AvailabilityResponse, GymCreate, Interval

from factories import make_booking, make_gym, make_user


class TestModels:
    """ORM mappings and DDL"""

    def test_mappers_configure(self):
        configure_mappers()

    @pytest.mark.parametrize("table", ["users", "gyms", "bookings", "extensions"])
    def test_ddl_compiles_for_postgres(self, table):
        ddl = str(CreateTable(Base.metadata.tables[table]).compile(dialect=postgresql.dialect()))
        assert f"CREATE TABLE {table}" in ddl

    def test_enums_persist_values(self, db_session):
        make_user(db_session, "owner@example.com", role=UserRole.OWNER)

        raw = db_session.connection().exec_driver_sql("SELECT role FROM users").scalar()
        assert raw == "owner"

    def test_one_gym_per_owner(self, db_session, owner, gym):
        with pytest.raises(IntegrityError):
            make_gym(db_session, owner, name="Second Gym")
        db_session.rollback()

    def test_one_extension_per_booking(self, db_session, customer, owner, gym):
        booking = make_booking(db_session, customer, gym)
        db_session.add(Extension(booking_id=booking.id, owner_id=owner.id, duration=30))
        db_session.commit()

        db_session.add(Extension(booking_id=booking.id, owner_id=owner.id, duration=15))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_booking_defaults(self, db_session, customer, gym):
        booking = make_booking(db_session, customer, gym)

        assert booking.has_active_extension is False
        assert booking.rating is None
        assert inspect(booking).persistent


class TestSchemas:
    def test_booking_serializes_display_date_and_aliases(self):
        booking = BookingSchema(
            id=uuid4(),
            user_id=uuid4(),
            gym_id=uuid4(),
            date=date(2030, 1, 7),
            from_time="06:30",
            to_time="07:15",
            total_price=Decimal("450.00"),
            status=BookingStatus.SCHEDULED,
            created_at=datetime(2030, 1, 1, 9, 0),
        )

        body = booking.model_dump(by_alias=True, mode="json")
        assert body["date"] == "07/01/2030"
        assert body["from"] == "06:30"
        assert body["to"] == "07:15"
        assert body["status"] == "scheduled"

    def test_booking_create_accepts_from_alias(self):
        data = BookingCreate.model_validate({"from": "06:30", "to": "07:15"})
        assert data.from_ == "06:30"
        assert data.gym_id is None

    def test_interval_round_trips_from_key(self):
        interval = Interval.model_validate({"from": "06:00", "to": "08:00"})
        assert interval.model_dump(by_alias=True) == {"from": "06:00", "to": "08:00"}

    def test_availability_alias(self):
        response = AvailabilityResponse(gym_id=uuid4(), date="07/01/2030", from_="06:30", to="07:15", available=True)
        assert response.model_dump(by_alias=True)["from"] == "06:30"

    def test_gym_create_rejects_bad_pincode(self):
        with pytest.raises(PydanticValidationError):
            GymCreate(
                full_name="Gym Owner",
                contact_info="9876543210",
                gym_name="Iron Temple",
                upi_id="owner@okbank",
                gst_number="29ABCDE1234F1Z5",
                price=Decimal("600.00"),
                address_line_1="12 MG Road",
                city="Bengaluru",
                state="Karnataka",
                pincode="5600",
                google_maps_link="https://maps.app.goo.gl/abc123",
                max_occupants=40,
                agreement=True,
            )
