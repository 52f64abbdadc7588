# backend/salonbook/services/scheduling/__init__.py
"""
Appointment scheduling engine.

hours        → weekday hours strings to DayHours / closed
slots        → candidate "HH:MM" start times for a day
availability → open slots per day over a rolling window
aggregator   → multi-service duration / price totals
conflicts    → half-open interval overlap for a staff member
lifecycle    → booking, cancel, complete
"""

from .aggregator import ServiceTotals, aggregate_services
from .availability import DayAvailability, SalonAvailability, calculate_availability
from .config import SchedulingConfig, get_scheduling_config
from .conflicts import find_conflicts, has_conflict, intervals_overlap
from .hours import DayHours, parse_day_hours, resolve_day_hours
from .lifecycle import AppointmentManager, AppointmentPage, AppointmentStats
from .locks import LocalStaffLocks, RedisStaffLocks, StaffLocks
from .records import (
    ACTIVE_STATUSES,
    TRANSITIONS,
    Appointment,
    AppointmentStatus,
    Salon,
    Service,
    ServiceLine,
    Staff,
)
from .slots import SlotRange, generate_slots
from .store import AppointmentFilters, AppointmentStore, SqlAlchemyStore

__all__ = [
    "ACTIVE_STATUSES",
    "TRANSITIONS",
    "Appointment",
    "AppointmentFilters",
    "AppointmentManager",
    "AppointmentPage",
    "AppointmentStats",
    "AppointmentStatus",
    "AppointmentStore",
    "DayAvailability",
    "DayHours",
    "LocalStaffLocks",
    "RedisStaffLocks",
    "Salon",
    "SalonAvailability",
    "SchedulingConfig",
    "Service",
    "ServiceLine",
    "ServiceTotals",
    "SlotRange",
    "SqlAlchemyStore",
    "Staff",
    "StaffLocks",
    "aggregate_services",
    "calculate_availability",
    "find_conflicts",
    "generate_slots",
    "get_scheduling_config",
    "has_conflict",
    "intervals_overlap",
    "parse_day_hours",
    "resolve_day_hours",
]
