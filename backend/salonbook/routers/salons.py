# backend/salonbook/routers/salons.py
"""
Salon endpoints.

GET /salons/{id}/availability - open slots for the next days
GET /salons/{id}/services     - services offered by the salon
"""

from datetime import date

from fastapi import APIRouter, Depends

from ..deps import get_store
from ..schemas.salons import (
    AvailabilityResponse,
    DayAvailabilityRead,
    SalonServicesResponse,
    SalonSummary,
    SalonWithHours,
    ServiceRead,
)
from ..services.scheduling import (
    AppointmentStore,
    calculate_availability,
    get_scheduling_config,
)
from ..services.scheduling.errors import SalonNotFound

router = APIRouter(prefix="/salons", tags=["salons"])


@router.get("/{salon_id}/availability", response_model=AvailabilityResponse)
def get_availability(
    salon_id: int,
    start_date: date | None = None,
    store: AppointmentStore = Depends(get_store),
):
    """Open slots per day for the availability window starting at start_date (default today)."""
    result = calculate_availability(
        store,
        salon_id,
        start_date or date.today(),
        get_scheduling_config(),
    )

    return AvailabilityResponse(
        message="Salon availability retrieved successfully",
        salon=SalonWithHours(
            id=result.salon.id,
            name=result.salon.name,
            hours=result.salon.hours,
        ),
        availability=[DayAvailabilityRead.model_validate(day) for day in result.days],
        total_days=len(result.days),
        available_days=result.available_days,
    )


@router.get("/{salon_id}/services", response_model=SalonServicesResponse)
def get_salon_services(
    salon_id: int,
    store: AppointmentStore = Depends(get_store),
):
    salon = store.get_salon(salon_id)
    if salon is None:
        raise SalonNotFound(details={"salon_id": salon_id})

    services = store.list_salon_services(salon_id)
    if services:
        message = (
            f"Successfully retrieved {len(services)} "
            f"service{'' if len(services) == 1 else 's'} for this salon."
        )
    else:
        message = "No services available at this salon yet."

    return SalonServicesResponse(
        message=message,
        salon=SalonSummary(id=salon.id, name=salon.name),
        services=[ServiceRead.model_validate(s) for s in services],
        total_services=len(services),
    )
