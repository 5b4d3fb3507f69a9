from __future__ import annotations

from collections.abc import Iterable

from washbook.domain.entities.booking_draft import VehicleType
from washbook.domain.entities.service_catalog import ServiceItem

MOTORCYCLE_MULTIPLIER = 0.80


def calculate_service_price(service: ServiceItem, vehicle_type: VehicleType) -> int:
    """Base price scaled by the service's multiplier for the vehicle type, rounded to whole units."""
    if vehicle_type == VehicleType.suv:
        multiplier = service.suv_multiplier or 1.20
    elif vehicle_type == VehicleType.van:
        multiplier = service.van_multiplier or 1.40
    elif vehicle_type == VehicleType.truck:
        multiplier = service.truck_multiplier or 1.60
    elif vehicle_type == VehicleType.motorcycle:
        multiplier = MOTORCYCLE_MULTIPLIER
    else:
        # sedan, hatchback and the motor variants
        multiplier = service.sedan_multiplier or 1.00
    return round(service.price * multiplier)


def toggle_service(selected: Iterable[str], key: str) -> tuple[str, ...]:
    """Add `key` at the end if absent, remove it if present. Order of the rest is kept."""
    current = tuple(selected)
    if key in current:
        return tuple(k for k in current if k != key)
    return current + (key,)


def unique_keys(keys: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(keys))


def unknown_service_keys(selected: Iterable[str], catalog: Iterable[ServiceItem]) -> list[str]:
    known = {item.key for item in catalog}
    return [key for key in selected if key not in known]


def services_total(selected: Iterable[str], catalog: Iterable[ServiceItem]) -> float:
    """Sum of catalog prices for the selected keys. Keys missing from the catalog count as 0."""
    prices = {item.key: item.price for item in catalog}
    return sum(prices.get(key, 0) for key in selected)
