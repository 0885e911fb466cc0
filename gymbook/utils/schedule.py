"""
Weekly schedule rules: time parsing, weekday normalisation, per-day slot
validation and the availability check used before a booking is stored.

Everything here is pure; callers own persistence.
"""
import re
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from gymbook.core.exceptions import ValidationError

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

DAY_ALIASES = {
    "monday": "Monday",
    "mon": "Monday",
    "tuesday": "Tuesday",
    "tue": "Tuesday",
    "wednesday": "Wednesday",
    "wed": "Wednesday",
    "thursday": "Thursday",
    "thu": "Thursday",
    "friday": "Friday",
    "fri": "Friday",
    "saturday": "Saturday",
    "sat": "Saturday",
    "sunday": "Sunday",
    "sun": "Sunday",
}

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value) -> Optional[int]:
    """Minutes since midnight for a 24h "HH:MM" string, None if malformed."""
    if not isinstance(value, str):
        return None
    match = TIME_PATTERN.match(value)
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def normalize_day_name(token: str) -> Optional[str]:
    """'  mon ' -> 'Monday'. Returns None for tokens that are not a weekday."""
    if not isinstance(token, str):
        return None
    return DAY_ALIASES.get(token.strip().lower())


def _bounds(interval: Mapping) -> Tuple[Optional[str], Optional[str]]:
    return interval.get("from"), interval.get("to")


def validate_day_slots(intervals: Iterable[Mapping], min_minutes: int = 60) -> List[str]:
    """
    Validate one weekday's list of `{"from", "to"}` intervals.

    Returns a list of human readable errors, empty when the list is valid:
    every interval well formed, `from` before `to`, at least `min_minutes`
    long, no exact duplicates and no two intervals overlapping (half-open).
    """
    errors: List[str] = []
    seen: List[Tuple[str, str, int, int]] = []

    for interval in intervals:
        start, end = _bounds(interval)
        start_min, end_min = parse_hhmm(start), parse_hhmm(end)
        if start_min is None or end_min is None:
            errors.append(f"invalid time format: {start} - {end} (use HH:MM)")
            continue

        if start_min >= end_min:
            errors.append(f"from must precede to: {start} - {end}")

        if end_min - start_min < min_minutes:
            errors.append(f"minimum duration one hour: {start} - {end}")

        if any(s == start and e == end for s, e, _, _ in seen):
            errors.append(f"duplicate slot: {start} - {end}")

        for s, e, s_min, e_min in seen:
            if start_min < e_min and s_min < end_min:
                errors.append(f"overlapping slot: {start} - {end} overlaps with {s} - {e}")

        seen.append((start, end, start_min, end_min))

    return errors


def normalize_schedule_slots(slots: Mapping[str, Iterable[Mapping]], min_minutes: int = 60) -> Dict[str, List[dict]]:
    """
    Validate a whole weekly submission and return it keyed by canonical day
    names, intervals sorted by start time.

    Raises ValidationError listing every offending day; nothing is returned
    unless all days are valid.
    """
    problems = []
    normalized: Dict[str, List[dict]] = {}

    for token, intervals in slots.items():
        intervals = [dict(i) for i in intervals]
        day = normalize_day_name(token)
        if day is None:
            problems.append({"day": token, "errors": [f"unrecognized weekday: {token!r}"]})
            continue
        if day in normalized:
            problems.append({"day": token, "errors": [f"{day} given more than once"]})
            continue

        day_errors = validate_day_slots(intervals, min_minutes=min_minutes)
        if day_errors:
            problems.append({"day": day, "errors": day_errors})
            continue

        normalized[day] = sorted(
            ({"from": i["from"], "to": i["to"]} for i in intervals),
            key=lambda i: i["from"],
        )

    if problems:
        raise ValidationError("Schedule validation failed", field="slots", details=problems)

    return normalized


def is_slot_available(gym, day: date, from_time: str, to_time: str) -> bool:
    """
    True iff [from_time, to_time) sits entirely inside one of the gym's open
    intervals for that weekday. A partial overlap is not clipped, it is a no.
    """
    start, end = parse_hhmm(from_time), parse_hhmm(to_time)
    if start is None or end is None or start >= end:
        return False

    for interval in gym.slots.get(weekday_name(day), []):
        open_from, open_to = parse_hhmm(interval.get("from")), parse_hhmm(interval.get("to"))
        if open_from is None or open_to is None:
            continue
        if start >= open_from and end <= open_to:
            return True
    return False
