# backend/salonbook/routers/appointments.py
"""
Appointment endpoints. Every route acts on behalf of the user forwarded
by the auth gateway and only sees that user's appointments.
"""

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ..deps import get_current_user_id, get_manager
from ..schemas.appointments import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentRead,
    AppointmentResponse,
    AppointmentStatsRead,
    AppointmentStatsResponse,
    Pagination,
)
from ..services.scheduling import AppointmentFilters, AppointmentManager, AppointmentStatus

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentCreate,
    user_id: int = Depends(get_current_user_id),
    manager: AppointmentManager = Depends(get_manager),
):
    appointment = manager.book(
        user_id=user_id,
        salon_id=data.salon_id,
        staff_id=data.staff_id,
        start_at=data.start_at,
        service_ids=data.service_ids,
        notes=data.notes,
    )
    return AppointmentResponse(
        message="Appointment booked successfully",
        appointment=AppointmentRead.model_validate(appointment),
    )


@router.get("", response_model=AppointmentListResponse)
def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    salon_id: Optional[int] = None,
    staff_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort: Literal["start_at", "created_at"] = "start_at",
    order: Literal["asc", "desc"] = "desc",
    user_id: int = Depends(get_current_user_id),
    manager: AppointmentManager = Depends(get_manager),
):
    filters = AppointmentFilters(
        status=status_filter,
        salon_id=salon_id,
        staff_id=staff_id,
        date_from=date_from,
        date_to=date_to,
        sort=sort,
        order=order,
    )
    result = manager.list_for_user(user_id, filters, page=page, limit=limit)

    if result.total == 0:
        message = "No appointments found. You haven't booked any appointments yet."
    elif not result.items:
        message = "No appointments found for the current page."
    else:
        count = len(result.items)
        message = f"Successfully retrieved {count} appointment{'' if count == 1 else 's'}"

    return AppointmentListResponse(
        message=message,
        appointments=[AppointmentRead.model_validate(a) for a in result.items],
        pagination=Pagination(
            current_page=result.page,
            total_pages=result.total_pages,
            total_count=result.total,
            limit=result.limit,
            has_next_page=result.has_next,
            has_prev_page=result.has_prev,
        ),
    )


@router.get("/stats", response_model=AppointmentStatsResponse)
def get_appointment_stats(
    user_id: int = Depends(get_current_user_id),
    manager: AppointmentManager = Depends(get_manager),
):
    stats = manager.stats(user_id)
    return AppointmentStatsResponse(
        message="Appointment statistics retrieved successfully",
        stats=AppointmentStatsRead.model_validate(stats),
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    user_id: int = Depends(get_current_user_id),
    manager: AppointmentManager = Depends(get_manager),
):
    appointment = manager.get(appointment_id, user_id)
    return AppointmentResponse(
        message="Appointment details retrieved successfully",
        appointment=AppointmentRead.model_validate(appointment),
    )


@router.put("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    data: Optional[AppointmentCancel] = Body(None),
    user_id: int = Depends(get_current_user_id),
    manager: AppointmentManager = Depends(get_manager),
):
    reason = data.cancellation_reason if data else None
    appointment = manager.cancel(appointment_id, user_id, reason=reason)
    return AppointmentResponse(
        message="Appointment cancelled successfully",
        appointment=AppointmentRead.model_validate(appointment),
    )


@router.put("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: int,
    user_id: int = Depends(get_current_user_id),
    manager: AppointmentManager = Depends(get_manager),
):
    appointment = manager.complete(appointment_id, user_id)
    return AppointmentResponse(
        message="Appointment marked as completed successfully",
        appointment=AppointmentRead.model_validate(appointment),
    )
