# backend/salonbook/services/scheduling/slots.py
"""
Slot generator.

A day's candidate start times are "HH:MM" labels from open hour up to, but
not including, close hour. Slots never span midnight.
"""

from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from .config import minutes_to_time_str, time_str_to_minutes
from .hours import DayHours

DEFAULT_STEP_MINUTES = 60


class SlotRange:
    """
    Lazy, restartable sequence of slot labels for one day.

    Every iteration starts over from the open hour; nothing is
    materialized until iterated.
    """

    __slots__ = ("open_hour", "close_hour", "step_minutes")

    def __init__(self, open_hour: int, close_hour: int, step_minutes: int = DEFAULT_STEP_MINUTES):
        if step_minutes <= 0:
            raise ValueError(f"step_minutes must be positive, got {step_minutes}")
        if not 0 <= open_hour <= close_hour <= 24:
            raise ValueError(f"invalid hours: {open_hour}-{close_hour}")
        self.open_hour = open_hour
        self.close_hour = close_hour
        self.step_minutes = step_minutes

    @property
    def _start(self) -> int:
        return self.open_hour * 60

    @property
    def _end(self) -> int:
        return self.close_hour * 60

    def __iter__(self) -> Iterator[str]:
        for minutes in range(self._start, self._end, self.step_minutes):
            yield minutes_to_time_str(minutes)

    def __len__(self) -> int:
        return len(range(self._start, self._end, self.step_minutes))

    def __contains__(self, label: object) -> bool:
        if not isinstance(label, str):
            return False
        try:
            minutes = time_str_to_minutes(label)
        except ValueError:
            return False
        return (
            self._start <= minutes < self._end
            and (minutes - self._start) % self.step_minutes == 0
        )

    def __repr__(self) -> str:
        return f"SlotRange({self.open_hour}, {self.close_hour}, step_minutes={self.step_minutes})"

    def starts_on(self, day: date) -> Iterator[datetime]:
        """Slot start datetimes on a given day."""
        midnight = datetime.combine(day, datetime.min.time())
        for minutes in range(self._start, self._end, self.step_minutes):
            yield midnight + timedelta(minutes=minutes)


def generate_slots(
    hours: Optional[DayHours],
    step_minutes: int = DEFAULT_STEP_MINUTES,
) -> SlotRange:
    """Slots for a day; empty when closed (hours is None)."""
    if hours is None:
        return SlotRange(0, 0, step_minutes)
    return SlotRange(hours.open_hour, hours.close_hour, step_minutes)
