from datetime import date
from types import SimpleNamespace

import pytest

from gymbook.core.exceptions import ValidationError
from gymbook.utils.schedule import (
    format_hhmm,
    is_slot_available,
    normalize_day_name,
    normalize_schedule_slots,
    parse_hhmm,
    validate_day_slots,
    weekday_name,
)


def _slots(*pairs):
    return [{"from": f, "to": t} for f, t in pairs]


def _gym(slots):
    return SimpleNamespace(slots=slots)


class TestTimeHelpers:
    """HH:MM parsing and weekday names"""

    def test_parse_valid(self):
        assert parse_hhmm("00:00") == 0
        assert parse_hhmm("06:30") == 390
        assert parse_hhmm("23:59") == 1439

    @pytest.mark.parametrize("value", ["24:00", "6:30", "06:60", "0630", "", None, 630])
    def test_parse_invalid(self, value):
        assert parse_hhmm(value) is None

    def test_format_round_trip(self):
        assert format_hhmm(390) == "06:30"

    def test_weekday_name(self):
        assert weekday_name(date(2030, 1, 7)) == "Monday"
        assert weekday_name(date(2030, 1, 13)) == "Sunday"

    @pytest.mark.parametrize("token,expected", [
        ("monday", "Monday"),
        ("  FRIDAY ", "Friday"),
        ("wed", "Wednesday"),
        ("Sun", "Sunday"),
        ("funday", None),
    ])
    def test_normalize_day_name(self, token, expected):
        assert normalize_day_name(token) == expected


class TestValidateDaySlots:
    """Per-day slot validation"""

    def test_valid_day_has_no_errors(self):
        assert validate_day_slots(_slots(("06:00", "08:00"), ("17:00", "21:00"))) == []

    def test_adjacent_intervals_do_not_overlap(self):
        assert validate_day_slots(_slots(("06:00", "07:00"), ("07:00", "08:00"))) == []

    def test_empty_day_is_valid(self):
        assert validate_day_slots([]) == []

    def test_from_must_precede_to(self):
        errors = validate_day_slots(_slots(("09:00", "08:00")))
        assert any("from must precede to" in e for e in errors)

    def test_minimum_duration(self):
        errors = validate_day_slots(_slots(("06:00", "06:45")))
        assert errors == ["minimum duration one hour: 06:00 - 06:45"]

    def test_exactly_one_hour_is_allowed(self):
        assert validate_day_slots(_slots(("06:00", "07:00"))) == []

    def test_duplicate_is_reported(self):
        errors = validate_day_slots(_slots(("06:00", "08:00"), ("06:00", "08:00")))
        assert "duplicate slot: 06:00 - 08:00" in errors

    def test_overlap_reported_per_pair(self):
        errors = validate_day_slots(_slots(("06:00", "08:00"), ("07:00", "09:00"), ("07:30", "10:00")))
        overlaps = [e for e in errors if e.startswith("overlapping slot")]
        assert len(overlaps) == 3

    def test_malformed_time(self):
        errors = validate_day_slots(_slots(("6am", "08:00")))
        assert errors and errors[0].startswith("invalid time format")

    def test_custom_minimum(self):
        assert validate_day_slots(_slots(("06:00", "06:30")), min_minutes=30) == []


class TestNormalizeScheduleSlots:
    """Whole-week submissions"""

    def test_canonical_names_and_sorted_intervals(self):
        result = normalize_schedule_slots({
            " monday": [{"from": "17:00", "to": "19:00"}, {"from": "06:00", "to": "08:00"}],
            "TUE": [{"from": "06:00", "to": "07:00"}],
        })
        assert list(result) == ["Monday", "Tuesday"]
        assert result["Monday"][0] == {"from": "06:00", "to": "08:00"}

    def test_unrecognized_weekday_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            normalize_schedule_slots({"Mondayy": [{"from": "06:00", "to": "08:00"}]})
        assert exc.value.field == "slots"
        assert exc.value.details[0]["day"] == "Mondayy"

    def test_same_day_twice_is_rejected(self):
        with pytest.raises(ValidationError):
            normalize_schedule_slots({
                "Monday": [{"from": "06:00", "to": "08:00"}],
                "mon": [{"from": "09:00", "to": "10:00"}],
            })

    def test_one_bad_day_rejects_whole_week(self):
        with pytest.raises(ValidationError) as exc:
            normalize_schedule_slots({
                "Monday": [{"from": "06:00", "to": "08:00"}],
                "Tuesday": [{"from": "06:00", "to": "06:30"}],
            })
        assert [d["day"] for d in exc.value.details] == ["Tuesday"]


class TestIsSlotAvailable:
    """Containment in the gym's weekly intervals"""

    gym = _gym({"Monday": _slots(("06:00", "08:00"), ("17:00", "21:00"))})
    monday = date(2030, 1, 7)

    def test_fully_contained(self):
        assert is_slot_available(self.gym, self.monday, "06:30", "07:15")

    def test_exact_bounds(self):
        assert is_slot_available(self.gym, self.monday, "06:00", "08:00")

    def test_partial_overlap_is_not_clipped(self):
        assert not is_slot_available(self.gym, self.monday, "07:30", "08:30")

    def test_spanning_two_intervals(self):
        assert not is_slot_available(self.gym, self.monday, "07:00", "18:00")

    def test_closed_weekday(self):
        assert not is_slot_available(self.gym, date(2030, 1, 8), "06:30", "07:00")

    def test_gym_without_schedule(self):
        assert not is_slot_available(_gym({}), self.monday, "06:30", "07:00")

    def test_malformed_request(self):
        assert not is_slot_available(self.gym, self.monday, "7:00", "07:30")
