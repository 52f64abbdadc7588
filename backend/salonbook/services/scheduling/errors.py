# backend/salonbook/services/scheduling/errors.py
"""
Scheduling error taxonomy.

Every error carries the HTTP status it maps to, so routers and the app-level
exception handler never need to know the concrete class.

    SchedulingError
    ├── NotFound                404
    │   ├── SalonNotFound
    │   └── AppointmentNotFound
    ├── ValidationError         422
    │   └── HoursParseError
    ├── InvalidStaff            400
    ├── InvalidServices         400
    ├── InvalidTransition       400
    ├── SchedulingConflict      409
    └── PersistenceFailure      500
"""

from typing import Any, Optional


class SchedulingError(Exception):
    status_code = 400
    default_message = "Scheduling request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class NotFound(SchedulingError):
    status_code = 404
    default_message = "Not found"


class SalonNotFound(NotFound):
    default_message = "Salon not found"


class AppointmentNotFound(NotFound):
    default_message = "Appointment not found"


class ValidationError(SchedulingError):
    status_code = 422
    default_message = "Invalid request"


class HoursParseError(ValidationError):
    default_message = "Invalid business hours"

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(
            f"Invalid business hours {text!r}: {reason}",
            {"hours": text, "reason": reason},
        )


class InvalidStaff(SchedulingError):
    default_message = (
        "Invalid staff member or salon. "
        "Please verify the staff member works at this salon."
    )


class InvalidServices(SchedulingError):
    default_message = "One or more services are not available at this salon"


class InvalidTransition(SchedulingError):
    default_message = "Appointment status change is not allowed"


class SchedulingConflict(SchedulingError):
    status_code = 409
    default_message = (
        "This staff member already has an appointment during the selected time. "
        "Please choose a different time or staff member."
    )


class PersistenceFailure(SchedulingError):
    status_code = 500
    default_message = "Failed to save appointment. Please try again."
