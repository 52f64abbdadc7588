# backend/salonbook/services/scheduling/lifecycle.py
"""
Appointment lifecycle: booking and status transitions.

    booked ──cancel──▶ cancelled
       │
       └──complete──▶ completed

pending is a valid status (it holds staff time and may become booked or
cancelled) but the booking flow here always creates booked appointments.

Cancelling an appointment that is already cancelled is accepted and
returns it unchanged; every other transition outside TRANSITIONS is
rejected with InvalidTransition.

Status writes only apply while the row still holds the status the check
was made against. A request that loses a race with another transition gets
InvalidTransition, or the unchanged appointment for a repeated cancel.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from ..events import emit_event
from .aggregator import aggregate_services
from .conflicts import find_conflicts
from .errors import (
    AppointmentNotFound,
    InvalidStaff,
    InvalidTransition,
    SalonNotFound,
    SchedulingConflict,
    ValidationError,
)
from .locks import StaffLocks
from .records import Appointment, AppointmentStatus
from .store import AppointmentFilters, AppointmentStore

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_REASON = "Cancelled by user"


@dataclass(frozen=True)
class AppointmentPage:
    items: list[Appointment]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class AppointmentStats:
    total: int
    upcoming: int
    by_status: dict[str, int]


class AppointmentManager:
    """Creates appointments and moves them through their statuses."""

    def __init__(
        self,
        store: AppointmentStore,
        locks: StaffLocks,
        notify: Callable[[str, dict], None] = emit_event,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.locks = locks
        self.notify = notify
        self.clock = clock

    # ── Booking ──────────────────────────────────────────────────────────

    def book(
        self,
        *,
        user_id: int,
        salon_id: int,
        staff_id: int,
        start_at: datetime,
        service_ids: Iterable[int],
        notes: Optional[str] = None,
    ) -> Appointment:
        """
        Book an appointment for user_id.

        Steps:
        1. Salon exists, staff works at the salon
        2. Aggregate services (duration, price, lines)
        3. end_at = start_at + total duration
        4. Under the staff lock: reject overlaps with active appointments
        5. Persist appointment + lines in one unit

        Raises:
            SalonNotFound, InvalidStaff, InvalidServices, ValidationError,
            SchedulingConflict, PersistenceFailure
        """
        if start_at.tzinfo is not None:
            raise ValidationError(
                "start_at must be a salon-local time without a timezone offset",
                {"start_at": start_at.isoformat()},
            )

        salon = self.store.get_salon(salon_id)
        if salon is None:
            raise SalonNotFound(details={"salon_id": salon_id})

        staff = self.store.get_staff(staff_id)
        if staff is None or staff.salon_id != salon_id:
            raise InvalidStaff(details={"salon_id": salon_id, "staff_id": staff_id})

        totals = aggregate_services(self.store, service_ids, salon_id=salon_id)
        end_at = start_at + timedelta(minutes=totals.total_duration)

        appointment = Appointment(
            salon_id=salon_id,
            staff_id=staff_id,
            user_id=user_id,
            start_at=start_at,
            end_at=end_at,
            total_duration=totals.total_duration,
            total_price=totals.total_price,
            status=AppointmentStatus.BOOKED,
            notes=notes,
            lines=list(totals.lines),
            created_at=self.clock(),
        )

        with self.locks.hold(staff_id):
            conflicts = find_conflicts(self.store, staff_id, start_at, end_at)
            if conflicts:
                logger.info(
                    f"Scheduling conflict: staff_id={staff_id}, "
                    f"requested={start_at:%Y-%m-%d %H:%M}-{end_at:%H:%M}, "
                    f"conflicting={[c.id for c in conflicts]}"
                )
                raise SchedulingConflict(details={
                    "staff_id": staff_id,
                    "start_at": start_at.isoformat(),
                    "end_at": end_at.isoformat(),
                })

            created = self.store.add_appointment(appointment)

        logger.info(
            f"Appointment booked: id={created.id}, user_id={user_id}, "
            f"salon_id={salon_id}, staff_id={staff_id}, "
            f"time={start_at:%Y-%m-%d %H:%M}-{end_at:%H:%M}, "
            f"services={[line.service_id for line in created.lines]}, "
            f"total={created.total_price}"
        )
        self._emit("appointment_booked", created)
        return created

    # ── Transitions ──────────────────────────────────────────────────────

    def cancel(
        self,
        appointment_id: int,
        user_id: int,
        reason: Optional[str] = None,
    ) -> Appointment:
        """Cancel; repeating the cancel of a cancelled appointment is a no-op."""
        appointment = self.get(appointment_id, user_id)

        if appointment.status == AppointmentStatus.CANCELLED:
            logger.info(f"Appointment {appointment_id} already cancelled, nothing to do")
            return appointment

        current = appointment.status
        self._check_transition(appointment, AppointmentStatus.CANCELLED)
        appointment.status = AppointmentStatus.CANCELLED
        appointment.cancelled_at = self.clock()
        appointment.cancelled_by = user_id
        appointment.cancellation_reason = reason or DEFAULT_CANCELLATION_REASON

        saved = self.store.save_status(appointment, current)
        if saved is None:
            latest = self.get(appointment_id, user_id)
            if latest.status == AppointmentStatus.CANCELLED:
                logger.info(f"Appointment {appointment_id} cancelled concurrently, nothing to do")
                return latest
            raise self._transition_error(latest, AppointmentStatus.CANCELLED)

        logger.info(
            f"Appointment cancelled: id={appointment_id}, by user_id={user_id}, "
            f"reason={saved.cancellation_reason!r}"
        )
        self._emit("appointment_cancelled", saved)
        return saved

    def complete(self, appointment_id: int, user_id: int) -> Appointment:
        appointment = self.get(appointment_id, user_id)
        current = appointment.status
        self._check_transition(appointment, AppointmentStatus.COMPLETED)
        appointment.status = AppointmentStatus.COMPLETED

        saved = self.store.save_status(appointment, current)
        if saved is None:
            raise self._transition_error(
                self.get(appointment_id, user_id), AppointmentStatus.COMPLETED
            )

        logger.info(f"Appointment completed: id={appointment_id}")
        self._emit("appointment_completed", saved)
        return saved

    # ── Reads ────────────────────────────────────────────────────────────

    def get(self, appointment_id: int, user_id: int) -> Appointment:
        """Appointment of user_id; other users' appointments look missing."""
        appointment = self.store.get_appointment(appointment_id)
        if appointment is None or appointment.user_id != user_id:
            raise AppointmentNotFound(
                "Appointment not found. The appointment you're looking for "
                "doesn't exist or you don't have permission to view it.",
                {"appointment_id": appointment_id},
            )
        return appointment

    def list_for_user(
        self,
        user_id: int,
        filters: Optional[AppointmentFilters] = None,
        page: int = 1,
        limit: int = 20,
    ) -> AppointmentPage:
        if page < 1 or limit < 1:
            raise ValidationError(
                "page and limit must be positive",
                {"page": page, "limit": limit},
            )
        filters = filters or AppointmentFilters()
        items, total = self.store.list_user_appointments(
            user_id, filters, offset=(page - 1) * limit, limit=limit
        )
        return AppointmentPage(items=items, total=total, page=page, limit=limit)

    def stats(self, user_id: int) -> AppointmentStats:
        counts = self.store.status_counts(user_id)
        by_status = {status.value: counts.get(status, 0) for status in AppointmentStatus}
        return AppointmentStats(
            total=sum(by_status.values()),
            upcoming=self.store.count_upcoming(user_id, self.clock()),
            by_status=by_status,
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    @classmethod
    def _check_transition(cls, appointment: Appointment, target: AppointmentStatus) -> None:
        if not appointment.status.can_become(target):
            raise cls._transition_error(appointment, target)

    @staticmethod
    def _transition_error(appointment: Appointment, target: AppointmentStatus) -> InvalidTransition:
        return InvalidTransition(
            f"Cannot change appointment from {appointment.status.value} to {target.value}",
            {
                "appointment_id": appointment.id,
                "current_status": appointment.status.value,
                "requested_status": target.value,
            },
        )

    def _emit(self, event_type: str, appointment: Appointment) -> None:
        try:
            self.notify(event_type, {
                "appointment_id": appointment.id,
                "user_id": appointment.user_id,
                "salon_id": appointment.salon_id,
                "staff_id": appointment.staff_id,
                "status": appointment.status.value,
                "start_at": appointment.start_at.isoformat(),
            })
        except Exception:
            logger.exception(f"Failed to notify {event_type} for appointment {appointment.id}")
