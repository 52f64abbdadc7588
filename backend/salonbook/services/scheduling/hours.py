# backend/salonbook/services/scheduling/hours.py
"""
Business-hours parser.

Salon hours are stored per weekday as human strings:

    {"monday": "9:00 AM - 5:00 PM", "sunday": "Closed"}

Supported boundary forms:
    "9:00 AM", "9 AM", "9:00AM"   12-hour clock, meridiem in any case
    "09:00", "17:00", "24:00"     24-hour clock ("24:00" only as close time)

A day resolves to DayHours(open_hour, close_hour) or None (closed).
"""

from datetime import date, datetime
from typing import Mapping, NamedTuple, Optional

from .errors import HoursParseError

CLOSED_MARKER = "closed"

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_TWELVE_HOUR_FORMATS = ("%I:%M %p", "%I:%M%p", "%I %p", "%I%p")
_MIDNIGHT_CLOSE = "24:00"


class DayHours(NamedTuple):
    """Open/close boundary of a day, 24-hour integer hours, close exclusive."""
    open_hour: int
    close_hour: int


def parse_day_hours(text: str) -> Optional[DayHours]:
    """
    Parse one weekday entry.

    Returns:
        DayHours, or None when the salon is closed.

    Raises:
        HoursParseError: malformed string, boundary not on a whole hour,
            or close time not after open time.
    """
    if not isinstance(text, str):
        raise HoursParseError(repr(text), "expected a string")

    value = text.strip()
    if value.lower() == CLOSED_MARKER:
        return None

    parts = value.replace("–", "-").split("-")
    if len(parts) != 2:
        raise HoursParseError(text, "expected '<open> - <close>'")

    open_minutes = _parse_boundary(parts[0], text, allow_midnight_close=False)
    close_minutes = _parse_boundary(parts[1], text, allow_midnight_close=True)

    if close_minutes <= open_minutes:
        raise HoursParseError(text, "close time must be later than open time")

    return DayHours(open_minutes // 60, close_minutes // 60)


def resolve_day_hours(
    hours: Optional[Mapping[str, Optional[str]]],
    target_date: date,
) -> Optional[DayHours]:
    """
    Hours for the weekday of target_date.

    Keys are matched case-insensitively, full names ("monday") first,
    then three-letter abbreviations ("mon"). A missing entry means closed.
    """
    if not hours:
        return None

    normalized = {str(key).strip().lower(): val for key, val in hours.items()}
    day_name = WEEKDAYS[target_date.weekday()]

    for key in (day_name, day_name[:3]):
        if key in normalized:
            entry = normalized[key]
            if entry is None:
                return None
            return parse_day_hours(entry)

    return None


# ── Helpers ──────────────────────────────────────────────────────────────


def _parse_boundary(raw: str, text: str, allow_midnight_close: bool) -> int:
    """Parse one boundary to minutes since midnight."""
    value = raw.strip().upper()
    if not value:
        raise HoursParseError(text, "missing time")

    if value.endswith(("AM", "PM")):
        parsed = _strptime_any(value, _TWELVE_HOUR_FORMATS)
    elif allow_midnight_close and value == _MIDNIGHT_CLOSE:
        return 24 * 60
    else:
        parsed = _strptime_any(value, ("%H:%M",))

    if parsed is None:
        raise HoursParseError(text, f"unrecognized time {raw.strip()!r}")

    if parsed.minute:
        raise HoursParseError(text, f"{raw.strip()!r} is not on a whole hour")

    return parsed.hour * 60


def _strptime_any(value: str, formats: tuple[str, ...]) -> Optional[datetime]:
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None
