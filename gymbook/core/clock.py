from datetime import datetime, timedelta
from typing import Optional


class Clock:
    """Wall clock for every temporal rule. Naive local time, single zone."""

    def now(self) -> datetime:
        return datetime.now()

    def today(self):
        return self.now().date()


class FrozenClock(Clock):
    """A clock that only moves when told to. Used by tests."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, delta: Optional[timedelta] = None, **kwargs) -> datetime:
        self._instant = self._instant + (delta or timedelta(**kwargs))
        return self._instant


system_clock = Clock()


def get_clock() -> Clock:
    return system_clock
