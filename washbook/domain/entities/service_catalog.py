from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceItem:
    key: str
    title: str
    price: int
    id: str | None = None
    description: str = ""
    icon: str = "Wrench"
    category: str = "basic"  # "basic", "deluxe", "premium", "specialty"
    duration_minutes: int = 60
    is_active: bool = True
    notes: str | None = None
    # Vehicle-specific price multipliers
    sedan_multiplier: float = 1.00
    suv_multiplier: float = 1.20
    van_multiplier: float = 1.40
    truck_multiplier: float = 1.60
