from .tables import (
    AppointmentServices,
    Appointments,
    Base,
    Salons,
    Services,
    Staff,
    metadata,
    t_salon_services,
)

__all__ = [
    "AppointmentServices",
    "Appointments",
    "Base",
    "Salons",
    "Services",
    "Staff",
    "metadata",
    "t_salon_services",
]
