from datetime import date, datetime

import pytest

from gymbook.core.config import settings
from gymbook.models.booking import Booking, BookingStatus
from gymbook.models.extension import Extension, ExtensionStatus
from gymbook.services import extensions as extension_service
from gymbook.utils import sweeps
from gymbook.utils.sweeps import run_completion_sweep, run_extension_expiry_sweep, run_sweeps

from factories import make_booking


def _statuses(db):
    db.expire_all()
    return {b.from_time: b.status for b in db.query(Booking).all()}


class TestCompletionSweep:
    """Bookings whose end time has passed become completed"""

    @pytest.fixture()
    def bookings(self, db_session, customer, gym):
        make_booking(db_session, customer, gym, day=date(2030, 1, 6), from_time="06:00", to_time="07:00")
        make_booking(db_session, customer, gym, from_time="07:00", to_time="08:00", status=BookingStatus.PENDING)
        make_booking(db_session, customer, gym, from_time="09:00", to_time="10:00")
        make_booking(db_session, customer, gym, from_time="11:00", to_time="12:00", status=BookingStatus.CANCELLED)

    def test_uniform_rule_completes_scheduled_and_pending(self, db_session, clock, bookings):
        clock.set(datetime(2030, 1, 7, 9, 30))

        assert run_completion_sweep(db_session, clock, include_scheduled=True) == 2

        assert _statuses(db_session) == {
            "06:00": BookingStatus.COMPLETED,
            "07:00": BookingStatus.COMPLETED,
            "09:00": BookingStatus.SCHEDULED,
            "11:00": BookingStatus.CANCELLED,
        }

    def test_legacy_rule_only_completes_pending(self, db_session, clock, bookings):
        clock.set(datetime(2030, 1, 7, 9, 30))

        assert run_completion_sweep(db_session, clock, include_scheduled=False) == 1

        statuses = _statuses(db_session)
        assert statuses["06:00"] == BookingStatus.SCHEDULED
        assert statuses["07:00"] == BookingStatus.COMPLETED

    def test_default_follows_settings(self, db_session, clock, bookings, monkeypatch):
        monkeypatch.setattr(settings, "COMPLETION_SWEEP_INCLUDES_SCHEDULED", False)
        clock.set(datetime(2030, 1, 7, 9, 30))

        assert run_completion_sweep(db_session, clock) == 1

    def test_end_time_must_have_passed(self, db_session, clock, customer, gym):
        make_booking(db_session, customer, gym, from_time="06:00", to_time="07:00")
        clock.set(datetime(2030, 1, 7, 7, 0))

        assert run_completion_sweep(db_session, clock) == 0

    def test_idempotent(self, db_session, clock, bookings):
        clock.set(datetime(2030, 1, 7, 23, 0))

        assert run_completion_sweep(db_session, clock) == 3
        assert run_completion_sweep(db_session, clock) == 0

    def test_small_batches_cover_everything(self, db_session, clock, bookings, monkeypatch):
        monkeypatch.setattr(settings, "SWEEP_BATCH_SIZE", 1)
        clock.set(datetime(2030, 1, 7, 23, 0))

        assert run_completion_sweep(db_session, clock) == 3

    def test_failing_record_does_not_halt_sweep(self, db_session, clock, bookings, monkeypatch):
        clock.set(datetime(2030, 1, 7, 23, 0))
        poisoned = db_session.query(Booking).filter(Booking.from_time == "07:00").one().id
        real_apply = sweeps._apply_in_batches

        def apply_with_poison(db, ids, apply, label):
            def guarded(session, chunk):
                if poisoned in chunk:
                    raise RuntimeError("corrupt row")
                return apply(session, chunk)
            return real_apply(db, ids, guarded, label)

        monkeypatch.setattr(sweeps, "_apply_in_batches", apply_with_poison)

        assert run_completion_sweep(db_session, clock) == 2
        statuses = _statuses(db_session)
        assert statuses["07:00"] == BookingStatus.PENDING
        assert statuses["06:00"] == BookingStatus.COMPLETED
        assert statuses["09:00"] == BookingStatus.COMPLETED


class TestExtensionExpirySweep:
    """Pending extensions are cancelled an hour after the booking ended"""

    @pytest.fixture()
    def extension(self, db_session, customer, gym):
        booking = make_booking(db_session, customer, gym, from_time="06:00", to_time="07:00")
        return extension_service.request_extension(db_session, customer, booking.id, 30)

    def test_within_the_hour_is_kept(self, db_session, clock, extension):
        clock.set(datetime(2030, 1, 7, 7, 59))

        assert run_extension_expiry_sweep(db_session, clock) == 0

    def test_after_the_hour_is_cancelled(self, db_session, clock, extension):
        clock.set(datetime(2030, 1, 7, 8, 1))

        assert run_extension_expiry_sweep(db_session, clock) == 1

        db_session.expire_all()
        ext = db_session.query(Extension).one()
        booking = db_session.query(Booking).one()
        assert ext.status == ExtensionStatus.CANCELLED
        assert booking.has_active_extension is False
        assert booking.extension_id == ext.id

    def test_resolved_extensions_untouched(self, db_session, clock, owner, extension):
        extension_service.respond_to_extension(db_session, owner, extension.id, "approved")
        clock.set(datetime(2030, 1, 8, 12, 0))

        assert run_extension_expiry_sweep(db_session, clock) == 0
        db_session.expire_all()
        assert db_session.query(Extension).one().status == ExtensionStatus.APPROVED


def test_run_sweeps_reports_both_counts(db_session, clock, customer, gym):
    booking = make_booking(db_session, customer, gym, from_time="06:00", to_time="07:00")
    extension_service.request_extension(db_session, customer, booking.id, 30)
    clock.set(datetime(2030, 1, 7, 9, 0))

    assert run_sweeps(db_session, clock) == {"completed": 1, "expired_extensions": 1}
