# backend/salonbook/services/scheduling/config.py
"""
Scheduling configuration.
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings


@dataclass(frozen=True)
class SchedulingConfig:
    """
    Configuration for slot generation and availability.

    Attributes:
        slot_step_minutes: Grid step in minutes (15/30/60)
        window_days: How many days the availability window covers
        block_overlapping_slots: Drop every slot overlapping a booking
            instead of only the slot whose label equals its start time
        lock_timeout_seconds: Max wait for the per-staff booking lock
    """
    slot_step_minutes: int = 60
    window_days: int = 7
    block_overlapping_slots: bool = False
    lock_timeout_seconds: float = 10.0

    def __post_init__(self):
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.window_days < 1:
            raise ValueError(f"window_days must be positive, got {self.window_days}")


@lru_cache
def get_scheduling_config() -> SchedulingConfig:
    """Scheduling configuration built from settings (singleton)."""
    return SchedulingConfig(
        slot_step_minutes=settings.slot_step_minutes,
        window_days=settings.availability_days,
        block_overlapping_slots=settings.block_overlapping_slots,
        lock_timeout_seconds=settings.lock_timeout_seconds,
    )


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)
