# backend/salonbook/services/scheduling/conflicts.py
"""
Conflict detection for a staff member.

Intervals are half-open [start, end): two appointments that merely touch
(one ends exactly when the next starts) do not conflict.
"""

from datetime import datetime

from .errors import ValidationError
from .records import ACTIVE_STATUSES, Appointment
from .store import AppointmentStore


def intervals_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> bool:
    """[start_a, end_a) and [start_b, end_b) share at least one instant."""
    return max(start_a, start_b) < min(end_a, end_b)


def find_conflicts(
    store: AppointmentStore,
    staff_id: int,
    start: datetime,
    end: datetime,
) -> list[Appointment]:
    """Active (pending/booked) appointments of staff_id overlapping [start, end)."""
    if end <= start:
        raise ValidationError(
            "Appointment must end after it starts",
            {"start_at": start.isoformat(), "end_at": end.isoformat()},
        )

    candidates = store.list_staff_appointments(staff_id, ACTIVE_STATUSES, start, end)
    return [
        appt for appt in candidates
        if appt.status in ACTIVE_STATUSES
        and intervals_overlap(appt.start_at, appt.end_at, start, end)
    ]


def has_conflict(
    store: AppointmentStore,
    staff_id: int,
    start: datetime,
    end: datetime,
) -> bool:
    return bool(find_conflicts(store, staff_id, start, end))
