# backend/salonbook/schemas/salons.py
"""
Pydantic schemas for salon availability and services.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class SalonSummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class SalonWithHours(SalonSummary):
    hours: dict[str, Optional[str]] = {}


class DayAvailabilityRead(BaseModel):
    """Open slots of a single day."""
    date: date
    times: list[str] = Field(description='Open start times, "HH:MM"')
    status: str = Field(description="closed / available / fully_booked")
    message: str

    model_config = {"from_attributes": True}


class AvailabilityResponse(BaseModel):
    success: bool = True
    message: str
    salon: SalonWithHours
    availability: list[DayAvailabilityRead]
    total_days: int
    available_days: int


class ServiceRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    duration: int
    price: Decimal

    model_config = {"from_attributes": True}


class SalonServicesResponse(BaseModel):
    success: bool = True
    message: str
    salon: SalonSummary
    services: list[ServiceRead]
    total_services: int
