# backend/salonbook/schemas/appointments.py

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from ..services.scheduling.records import AppointmentStatus


class AppointmentCreate(BaseModel):
    salon_id: int
    staff_id: int
    start_at: datetime
    # Emptiness is reported by the service aggregator (400), not by schema validation
    service_ids: list[int]
    notes: Optional[str] = Field(None, max_length=2000)


class AppointmentCancel(BaseModel):
    cancellation_reason: Optional[str] = Field(None, max_length=500)


class AppointmentServiceRead(BaseModel):
    id: int = Field(validation_alias=AliasChoices("service_id", "id"))
    name: str
    duration: int
    price: Decimal

    model_config = {"from_attributes": True}


class AppointmentRead(BaseModel):
    id: int
    salon_id: int
    staff_id: int
    user_id: int

    start_at: datetime
    end_at: datetime

    status: AppointmentStatus
    total_price: Decimal
    total_duration: int
    notes: Optional[str] = None

    services: list[AppointmentServiceRead] = []

    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[int] = None
    cancellation_reason: Optional[str] = None

    model_config = {"from_attributes": True}


class AppointmentResponse(BaseModel):
    success: bool = True
    message: str
    appointment: AppointmentRead


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class AppointmentListResponse(BaseModel):
    success: bool = True
    message: str
    appointments: list[AppointmentRead]
    pagination: Pagination


class AppointmentStatsRead(BaseModel):
    total: int
    upcoming: int
    by_status: dict[str, int]

    model_config = {"from_attributes": True}


class AppointmentStatsResponse(BaseModel):
    success: bool = True
    message: str
    stats: AppointmentStatsRead
