# backend/salonbook/services/scheduling/aggregator.py
"""
Service aggregator.

Turns the requested service ids into one booking total: summed duration,
summed price and the per-service line snapshots. Reads only.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from .errors import InvalidServices
from .records import Service, ServiceLine
from .store import AppointmentStore

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class ServiceTotals:
    total_duration: int
    total_price: Decimal
    lines: tuple[ServiceLine, ...]


def aggregate_services(
    store: AppointmentStore,
    service_ids: Iterable[int],
    salon_id: Optional[int] = None,
) -> ServiceTotals:
    """
    Validate requested services and compute totals.

    Args:
        store: Appointment store
        service_ids: Requested ids; duplicates collapse
        salon_id: When given, every service must be offered by this salon

    Raises:
        InvalidServices: empty request, or any id that does not resolve
    """
    requested = list(dict.fromkeys(service_ids))
    if not requested:
        raise InvalidServices(
            "At least one service must be selected",
            {"requested_services": []},
        )

    found = {service.id: service for service in store.get_services(requested, salon_id)}
    missing = [sid for sid in requested if sid not in found]
    if missing:
        raise InvalidServices(details={
            "requested_services": requested,
            "missing_services": missing,
            "available_service_names": [found[sid].name for sid in requested if sid in found],
        })

    services = [found[sid] for sid in requested]
    return summarize(services)


def summarize(services: list[Service]) -> ServiceTotals:
    """Sum durations and prices; prices stay Decimal until the final rounding."""
    total_duration = 0
    total_price = Decimal("0")
    for service in services:
        total_duration += service.duration
        total_price += Decimal(str(service.price))

    return ServiceTotals(
        total_duration=total_duration,
        total_price=total_price.quantize(CENTS, rounding=ROUND_HALF_UP),
        lines=tuple(ServiceLine.from_service(s) for s in services),
    )
