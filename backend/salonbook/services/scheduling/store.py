# backend/salonbook/services/scheduling/store.py
"""
Appointment store: the data-access seam of the scheduling engine.

AppointmentStore is the interface the engine depends on; SqlAlchemyStore
implements it over a request-scoped Session. Any object with the same
methods (e.g. an in-memory store in tests) can be injected instead.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Iterator, Optional, Protocol

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ...models import (
    AppointmentServices as DBAppointmentService,
    Appointments as DBAppointment,
    Salons as DBSalon,
    Services as DBService,
    Staff as DBStaff,
    t_salon_services,
)
from .errors import PersistenceFailure
from .records import (
    Appointment,
    AppointmentStatus,
    Salon,
    Service,
    ServiceLine,
    Staff,
)

logger = logging.getLogger(__name__)

SORT_FIELDS = ("start_at", "created_at")
SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class AppointmentFilters:
    """Filters for a user's appointment list."""
    status: Optional[AppointmentStatus] = None
    salon_id: Optional[int] = None
    staff_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None  # inclusive
    sort: str = "start_at"
    order: str = "desc"

    def __post_init__(self):
        if self.sort not in SORT_FIELDS:
            raise ValueError(f"sort must be one of {SORT_FIELDS}, got {self.sort!r}")
        if self.order not in SORT_ORDERS:
            raise ValueError(f"order must be one of {SORT_ORDERS}, got {self.order!r}")


class AppointmentStore(Protocol):
    """Everything the scheduling engine reads or writes."""

    def get_salon(self, salon_id: int) -> Optional[Salon]: ...

    def get_staff(self, staff_id: int) -> Optional[Staff]: ...

    def get_services(
        self,
        service_ids: Iterable[int],
        salon_id: Optional[int] = None,
    ) -> list[Service]: ...

    def list_salon_services(self, salon_id: int) -> list[Service]: ...

    def list_salon_appointments(
        self,
        salon_id: int,
        start: datetime,
        end: datetime,
        statuses: Iterable[AppointmentStatus],
    ) -> list[Appointment]: ...

    def list_staff_appointments(
        self,
        staff_id: int,
        statuses: Iterable[AppointmentStatus],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Appointment]: ...

    def add_appointment(self, appointment: Appointment) -> Appointment: ...

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]: ...

    def list_user_appointments(
        self,
        user_id: int,
        filters: AppointmentFilters,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[list[Appointment], int]: ...

    def status_counts(self, user_id: int) -> dict[AppointmentStatus, int]: ...

    def count_upcoming(self, user_id: int, now: datetime) -> int: ...

    def save_status(
        self,
        appointment: Appointment,
        expected_status: AppointmentStatus,
    ) -> Optional[Appointment]: ...


class SqlAlchemyStore:
    """AppointmentStore over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Database error while trying to {action}")
            raise PersistenceFailure(details={"action": action}) from e

    # ── Salons / staff / services ────────────────────────────────────────

    def get_salon(self, salon_id: int) -> Optional[Salon]:
        with self._guard("load salon"):
            row = self.db.get(DBSalon, salon_id)
        if row is None:
            return None
        return Salon(id=row.id, name=row.name, hours=dict(row.hours or {}))

    def get_staff(self, staff_id: int) -> Optional[Staff]:
        with self._guard("load staff"):
            row = self.db.get(DBStaff, staff_id)
        if row is None:
            return None
        return Staff(id=row.id, salon_id=row.salon_id, name=row.name)

    def get_services(
        self,
        service_ids: Iterable[int],
        salon_id: Optional[int] = None,
    ) -> list[Service]:
        ids = list(service_ids)
        if not ids:
            return []

        stmt = select(DBService).where(DBService.id.in_(ids))
        if salon_id is not None:
            stmt = stmt.join(
                t_salon_services,
                t_salon_services.c.service_id == DBService.id,
            ).where(t_salon_services.c.salon_id == salon_id)

        with self._guard("load services"):
            rows = self.db.scalars(stmt).all()
        return [_to_service(row) for row in rows]

    def list_salon_services(self, salon_id: int) -> list[Service]:
        stmt = (
            select(DBService)
            .join(t_salon_services, t_salon_services.c.service_id == DBService.id)
            .where(t_salon_services.c.salon_id == salon_id)
            .order_by(DBService.name)
        )
        with self._guard("load salon services"):
            rows = self.db.scalars(stmt).all()
        return [_to_service(row) for row in rows]

    # ── Appointments: read ───────────────────────────────────────────────

    def list_salon_appointments(
        self,
        salon_id: int,
        start: datetime,
        end: datetime,
        statuses: Iterable[AppointmentStatus],
    ) -> list[Appointment]:
        stmt = (
            self._appointments()
            .where(
                DBAppointment.salon_id == salon_id,
                DBAppointment.start_at >= start,
                DBAppointment.start_at < end,
                DBAppointment.status.in_([s.value for s in statuses]),
            )
            .order_by(DBAppointment.start_at)
        )
        with self._guard("load salon appointments"):
            rows = self.db.scalars(stmt).all()
        return [_to_appointment(row) for row in rows]

    def list_staff_appointments(
        self,
        staff_id: int,
        statuses: Iterable[AppointmentStatus],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Appointment]:
        stmt = self._appointments().where(
            DBAppointment.staff_id == staff_id,
            DBAppointment.status.in_([s.value for s in statuses]),
        )
        if start is not None and end is not None:
            # Single range comparison: existing [s, e) vs candidate [start, end)
            stmt = stmt.where(
                DBAppointment.start_at < end,
                DBAppointment.end_at > start,
            )
        stmt = stmt.order_by(DBAppointment.start_at)

        with self._guard("load staff appointments"):
            rows = self.db.scalars(stmt).all()
        return [_to_appointment(row) for row in rows]

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]:
        stmt = self._appointments().where(DBAppointment.id == appointment_id)
        with self._guard("load appointment"):
            row = self.db.scalars(stmt).first()
        return _to_appointment(row) if row is not None else None

    def list_user_appointments(
        self,
        user_id: int,
        filters: AppointmentFilters,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[list[Appointment], int]:
        conditions = [DBAppointment.user_id == user_id]
        if filters.status is not None:
            conditions.append(DBAppointment.status == filters.status.value)
        if filters.salon_id is not None:
            conditions.append(DBAppointment.salon_id == filters.salon_id)
        if filters.staff_id is not None:
            conditions.append(DBAppointment.staff_id == filters.staff_id)
        if filters.date_from is not None:
            conditions.append(
                DBAppointment.start_at >= datetime.combine(filters.date_from, datetime.min.time())
            )
        if filters.date_to is not None:
            conditions.append(
                DBAppointment.start_at <= datetime.combine(filters.date_to, datetime.max.time())
            )

        column = getattr(DBAppointment, filters.sort)
        ordering = column.asc() if filters.order == "asc" else column.desc()

        stmt = (
            self._appointments()
            .where(*conditions)
            .order_by(ordering, DBAppointment.id)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        count_stmt = select(func.count(DBAppointment.id)).where(*conditions)

        with self._guard("list appointments"):
            total = self.db.scalar(count_stmt) or 0
            rows = self.db.scalars(stmt).all()
        return [_to_appointment(row) for row in rows], total

    def status_counts(self, user_id: int) -> dict[AppointmentStatus, int]:
        stmt = (
            select(DBAppointment.status, func.count(DBAppointment.id))
            .where(DBAppointment.user_id == user_id)
            .group_by(DBAppointment.status)
        )
        with self._guard("count appointments"):
            rows = self.db.execute(stmt).all()
        return {AppointmentStatus(status): count for status, count in rows}

    def count_upcoming(self, user_id: int, now: datetime) -> int:
        stmt = select(func.count(DBAppointment.id)).where(
            DBAppointment.user_id == user_id,
            DBAppointment.status == AppointmentStatus.BOOKED.value,
            DBAppointment.start_at > now,
        )
        with self._guard("count upcoming appointments"):
            return self.db.scalar(stmt) or 0

    # ── Appointments: write ──────────────────────────────────────────────

    def add_appointment(self, appointment: Appointment) -> Appointment:
        """Insert the appointment and all its service lines in one commit."""
        row = DBAppointment(
            salon_id=appointment.salon_id,
            staff_id=appointment.staff_id,
            user_id=appointment.user_id,
            start_at=appointment.start_at,
            end_at=appointment.end_at,
            status=appointment.status.value,
            total_price=appointment.total_price,
            total_duration=appointment.total_duration,
            notes=appointment.notes,
            created_at=appointment.created_at,
        )
        row.lines = [
            DBAppointmentService(
                service_id=line.service_id,
                price=line.price,
                duration=line.duration,
            )
            for line in appointment.lines
        ]

        with self._guard("create appointment"):
            self.db.add(row)
            self.db.commit()

        created = self.get_appointment(row.id)
        if created is None:
            raise PersistenceFailure(details={"action": "reload appointment"})
        return created

    def save_status(
        self,
        appointment: Appointment,
        expected_status: AppointmentStatus,
    ) -> Optional[Appointment]:
        """
        Write the new status only if the row still has expected_status.

        Returns None when another request changed the status first.
        """
        stmt = (
            update(DBAppointment)
            .where(
                DBAppointment.id == appointment.id,
                DBAppointment.status == expected_status.value,
            )
            .values(
                status=appointment.status.value,
                cancelled_at=appointment.cancelled_at,
                cancelled_by=appointment.cancelled_by,
                cancellation_reason=appointment.cancellation_reason,
            )
            .execution_options(synchronize_session=False)
        )
        with self._guard("update appointment status"):
            result = self.db.execute(stmt)
            self.db.commit()

        if result.rowcount == 0:
            logger.info(
                f"Status of appointment {appointment.id} is no longer "
                f"{expected_status.value}, update skipped"
            )
            return None

        saved = self.get_appointment(appointment.id)
        if saved is None:
            raise PersistenceFailure(details={"action": "reload appointment"})
        return saved

    # ── Helpers ──────────────────────────────────────────────────────────

    @staticmethod
    def _appointments():
        return select(DBAppointment).options(
            selectinload(DBAppointment.lines).selectinload(DBAppointmentService.service)
        )


def _to_service(row: DBService) -> Service:
    return Service(
        id=row.id,
        name=row.name,
        duration=row.duration,
        price=row.price,
        description=row.description,
    )


def _to_appointment(row: DBAppointment) -> Appointment:
    return Appointment(
        id=row.id,
        salon_id=row.salon_id,
        staff_id=row.staff_id,
        user_id=row.user_id,
        start_at=row.start_at,
        end_at=row.end_at,
        status=AppointmentStatus(row.status),
        total_price=row.total_price,
        total_duration=row.total_duration,
        notes=row.notes,
        created_at=row.created_at,
        cancelled_at=row.cancelled_at,
        cancelled_by=row.cancelled_by,
        cancellation_reason=row.cancellation_reason,
        lines=[
            ServiceLine(
                service_id=line.service_id,
                name=line.service.name if line.service is not None else "",
                duration=line.duration,
                price=line.price,
            )
            for line in row.lines
        ],
    )
