# backend/salonbook/services/scheduling/records.py
"""
Plain records the scheduling engine works on.

The store maps database rows to these, so the engine never touches a
session and can run against any store implementation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class AppointmentStatus(str, Enum):
    PENDING = "pending"  # reserved for hold / pending-payment flows
    BOOKED = "booked"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]

    def can_become(self, target: "AppointmentStatus") -> bool:
        return target in TRANSITIONS[self]


TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.BOOKED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.BOOKED: frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED}),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}

# Statuses that hold a staff member's time
ACTIVE_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.BOOKED})


@dataclass(frozen=True)
class Salon:
    id: int
    name: str
    hours: dict[str, Optional[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class Staff:
    id: int
    salon_id: int
    name: str


@dataclass(frozen=True)
class Service:
    id: int
    name: str
    duration: int  # minutes
    price: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class ServiceLine:
    """Price/duration snapshot of one service inside an appointment."""
    service_id: int
    name: str
    duration: int
    price: Decimal

    @classmethod
    def from_service(cls, service: Service) -> "ServiceLine":
        return cls(
            service_id=service.id,
            name=service.name,
            duration=service.duration,
            price=service.price,
        )


@dataclass
class Appointment:
    salon_id: int
    staff_id: int
    user_id: int
    start_at: datetime
    end_at: datetime
    total_duration: int
    total_price: Decimal
    status: AppointmentStatus = AppointmentStatus.BOOKED
    notes: Optional[str] = None
    lines: list[ServiceLine] = field(default_factory=list)
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[int] = None
    cancellation_reason: Optional[str] = None

    @property
    def services(self) -> list[ServiceLine]:
        return self.lines
