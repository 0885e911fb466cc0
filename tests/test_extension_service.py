from datetime import date
from decimal import Decimal

import pytest

from gymbook.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from gymbook.models.booking import BookingStatus
from gymbook.models.extension import Extension, ExtensionStatus
from gymbook.services import bookings as booking_service
from gymbook.services import extensions as extension_service

from factories import MONDAY_DISPLAY, make_booking, make_gym


@pytest.fixture()
def booking(db_session, clock, customer, gym):
    return booking_service.create_booking(
        db_session, clock, customer,
        gym_id=str(gym.id), date=MONDAY_DISPLAY, from_time="06:30", to_time="07:15", total_price="450",
    )


class TestRequestExtension:
    def test_pending_request_flags_booking(self, db_session, customer, booking, owner):
        extension = extension_service.request_extension(db_session, customer, booking.id, 20)

        db_session.refresh(booking)
        assert extension.status == ExtensionStatus.PENDING
        assert extension.owner_id == owner.id
        assert extension.duration == 20
        assert booking.extension_id == extension.id
        assert booking.has_active_extension is True
        assert booking.status == BookingStatus.SCHEDULED

    def test_only_one_extension_per_booking(self, db_session, customer, booking):
        extension_service.request_extension(db_session, customer, booking.id, 20)

        with pytest.raises(ConflictError):
            extension_service.request_extension(db_session, customer, booking.id, 15)
        assert db_session.query(Extension).count() == 1

    def test_not_owner(self, db_session, other_customer, booking):
        with pytest.raises(AuthorizationError):
            extension_service.request_extension(db_session, other_customer, booking.id, 20)

    @pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.COMPLETED])
    def test_terminal_booking(self, db_session, customer, gym, status):
        finished = make_booking(db_session, customer, gym, status=status)

        with pytest.raises(ConflictError):
            extension_service.request_extension(db_session, customer, finished.id, 20)

    @pytest.mark.parametrize("duration", [0, -10, 12.5, None, True])
    def test_invalid_duration(self, db_session, customer, booking, duration):
        with pytest.raises(ValidationError):
            extension_service.request_extension(db_session, customer, booking.id, duration)

    def test_missing_booking(self, db_session, customer):
        with pytest.raises(NotFoundError):
            extension_service.request_extension(
                db_session, customer, "2b1f4c0e-4a7e-4a55-9a4e-6f0c2d7a1b11", 20
            )


class TestRespondToExtension:
    def test_scenario_approval_flow(self, db_session, customer, owner, other_owner, booking):
        extension = extension_service.request_extension(db_session, customer, booking.id, 20)

        with pytest.raises(AuthorizationError):
            extension_service.respond_to_extension(db_session, other_owner, extension.id, "approved")

        approved = extension_service.respond_to_extension(db_session, owner, extension.id, "approved")
        db_session.refresh(booking)

        assert approved.status == ExtensionStatus.APPROVED
        # 20 minutes at 600/hour
        assert booking.total_price == Decimal("650.00")
        assert booking.status == BookingStatus.PENDING
        assert booking.has_active_extension is False
        assert booking.to_time == "07:15"

        with pytest.raises(ConflictError):
            extension_service.respond_to_extension(db_session, owner, extension.id, "approved")

    def test_half_hour_at_600_adds_300(self, db_session, customer, owner, gym):
        target = make_booking(db_session, customer, gym, total_price="600.00")
        extension = extension_service.request_extension(db_session, customer, target.id, 30)

        extension_service.respond_to_extension(db_session, owner, extension.id, "approved")
        db_session.refresh(target)

        assert target.total_price == Decimal("900.00")

    def test_cancel_leaves_price_and_status(self, db_session, customer, owner, booking):
        extension = extension_service.request_extension(db_session, customer, booking.id, 20)

        cancelled = extension_service.respond_to_extension(db_session, owner, extension.id, "cancelled")
        db_session.refresh(booking)

        assert cancelled.status == ExtensionStatus.CANCELLED
        assert booking.total_price == Decimal("450.00")
        assert booking.status == BookingStatus.SCHEDULED
        assert booking.has_active_extension is False

    def test_invalid_decision(self, db_session, customer, owner, booking):
        extension = extension_service.request_extension(db_session, customer, booking.id, 20)

        with pytest.raises(ValidationError):
            extension_service.respond_to_extension(db_session, owner, extension.id, "maybe")

    def test_cannot_approve_after_booking_cancelled(self, db_session, clock, customer, owner, booking):
        extension = extension_service.request_extension(db_session, customer, booking.id, 20)
        booking_service.cancel_booking(db_session, clock, customer, booking.id)

        with pytest.raises(ConflictError):
            extension_service.respond_to_extension(db_session, owner, extension.id, "approved")

    def test_missing_extension(self, db_session, owner):
        with pytest.raises(NotFoundError):
            extension_service.respond_to_extension(
                db_session, owner, "2b1f4c0e-4a7e-4a55-9a4e-6f0c2d7a1b11", "approved"
            )


class TestOwnerPendingExtensions:
    def test_only_pending_for_this_owner_latest_date_first(
        self, db_session, customer, other_customer, owner, other_owner, gym
    ):
        other_gym = make_gym(db_session, other_owner, name="Elsewhere Gym")
        early = make_booking(db_session, customer, gym, day=date(2030, 1, 7))
        late = make_booking(db_session, other_customer, gym, day=date(2030, 1, 14))
        resolved = make_booking(db_session, customer, gym, day=date(2030, 1, 21))
        foreign = make_booking(db_session, customer, other_gym, day=date(2030, 1, 28))

        for b, who in ((early, customer), (late, other_customer), (resolved, customer), (foreign, customer)):
            extension_service.request_extension(db_session, who, b.id, 30)
        resolved_ext = db_session.query(Extension).filter(Extension.booking_id == resolved.id).one()
        extension_service.respond_to_extension(db_session, owner, resolved_ext.id, "cancelled")

        result = extension_service.list_owner_pending_extensions(db_session, owner.id)

        assert [r.booking_id for r in result] == [late.id, early.id]
        assert result[0].customer == "Ravi Kumar"
        assert result[0].mobile == "9123456780"
        assert result[0].model_dump()["date"] == "14/01/2030"


@pytest.mark.parametrize("duration", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_duration_is_a_validation_error(db_session, customer, booking, duration):
    with pytest.raises(ValidationError) as exc:
        extension_service.request_extension(db_session, customer, booking.id, duration)
    assert exc.value.field == "duration"
