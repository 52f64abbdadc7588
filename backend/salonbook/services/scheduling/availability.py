# backend/salonbook/services/scheduling/availability.py
"""
Availability calculation for a salon over a rolling window of days.

For each day:
  1. resolve the weekday's opening hours
  2. generate candidate slots
  3. take booked appointments starting that day
  4. drop slots taken by those appointments
  5. whatever is left is bookable

By default a slot is taken only when an appointment starts exactly at the
slot label (a 09:30 booking leaves the 09:00 slot open on an hourly grid).
With block_overlapping_slots every slot whose [t, t + step) overlaps an
appointment is dropped instead.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from .config import SchedulingConfig, get_scheduling_config
from .conflicts import intervals_overlap
from .errors import SalonNotFound
from .hours import resolve_day_hours
from .records import Appointment, AppointmentStatus, Salon
from .slots import SlotRange, generate_slots
from .store import AppointmentStore

logger = logging.getLogger(__name__)

STATUS_CLOSED = "closed"
STATUS_AVAILABLE = "available"
STATUS_FULLY_BOOKED = "fully_booked"


@dataclass(frozen=True)
class DayAvailability:
    date: date
    times: list[str] = field(default_factory=list)
    status: str = STATUS_CLOSED

    @property
    def message(self) -> str:
        if self.status == STATUS_CLOSED:
            return "Salon is closed on this day"
        if self.status == STATUS_FULLY_BOOKED:
            return "No available time slots for this day"
        return f"{len(self.times)} time slots available"


@dataclass(frozen=True)
class SalonAvailability:
    salon: Salon
    days: list[DayAvailability]

    @property
    def available_days(self) -> int:
        return sum(1 for day in self.days if day.times)


def calculate_availability(
    store: AppointmentStore,
    salon_id: int,
    reference_date: date,
    config: Optional[SchedulingConfig] = None,
) -> SalonAvailability:
    """
    Remaining open slots per day for window_days days from reference_date.

    Raises:
        SalonNotFound: unknown salon
        HoursParseError: a weekday hours string in the window is malformed
    """
    config = config or get_scheduling_config()

    salon = store.get_salon(salon_id)
    if salon is None:
        raise SalonNotFound(details={"salon_id": salon_id})

    days = [reference_date + timedelta(days=i) for i in range(config.window_days)]
    window_start = datetime.combine(days[0], datetime.min.time())
    window_end = window_start + timedelta(days=config.window_days)

    # One read for the whole window, bucketed per day
    booked = store.list_salon_appointments(
        salon_id, window_start, window_end, [AppointmentStatus.BOOKED]
    )
    by_day: dict[date, list[Appointment]] = defaultdict(list)
    for appt in booked:
        if appt.status == AppointmentStatus.BOOKED:
            by_day[appt.start_at.date()].append(appt)

    result = [
        _day_availability(salon, day, by_day.get(day, []), config)
        for day in days
    ]

    logger.debug(
        f"Availability for salon={salon_id} from {reference_date}: "
        f"{sum(len(d.times) for d in result)} open slots, {len(booked)} bookings"
    )

    return SalonAvailability(salon=salon, days=result)


def _day_availability(
    salon: Salon,
    day: date,
    appointments: list[Appointment],
    config: SchedulingConfig,
) -> DayAvailability:
    hours = resolve_day_hours(salon.hours, day)
    if hours is None:
        return DayAvailability(date=day, times=[], status=STATUS_CLOSED)

    slots = generate_slots(hours, config.slot_step_minutes)

    if config.block_overlapping_slots:
        times = _free_by_overlap(slots, day, appointments, config.slot_step_minutes)
    else:
        times = _free_by_label(slots, appointments)

    status = STATUS_AVAILABLE if times else STATUS_FULLY_BOOKED
    return DayAvailability(date=day, times=times, status=status)


def _free_by_label(slots: SlotRange, appointments: list[Appointment]) -> list[str]:
    taken = {appt.start_at.strftime("%H:%M") for appt in appointments}
    return [label for label in slots if label not in taken]


def _free_by_overlap(
    slots: SlotRange,
    day: date,
    appointments: list[Appointment],
    step_minutes: int,
) -> list[str]:
    step = timedelta(minutes=step_minutes)
    free = []
    for label, slot_start in zip(slots, slots.starts_on(day)):
        slot_end = slot_start + step
        if not any(
            intervals_overlap(slot_start, slot_end, appt.start_at, appt.end_at)
            for appt in appointments
        ):
            free.append(label)
    return free
