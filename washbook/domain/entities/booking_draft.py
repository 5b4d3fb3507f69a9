from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any


class VehicleType(str, Enum):
    sedan = "sedan"
    suv = "suv"
    hatchback = "hatchback"
    van = "van"
    truck = "truck"
    motorcycle = "motorcycle"
    motor_49cc = "motor 49 CC"
    motor_plus_49cc = "motor plus 49 CC"


class PaymentMethod(str, Enum):
    cash = "cash"
    card = "card"
    mobile = "mobile"
    wallet = "wallet"


# card/mobile/wallet have no gateway yet
ENABLED_PAYMENT_METHODS: frozenset[PaymentMethod] = frozenset({PaymentMethod.cash})


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class BookingDraft:
    # Worker
    worker_id: str = ""
    worker_name: str = ""
    base_price: float = 0

    # Service (required by the bookings table)
    service_id: str = ""
    service_name: str = ""
    estimated_duration: int = 60

    # Schedule
    date: str = ""  # YYYY-MM-DD
    time: str = ""  # HH:MM

    # Vehicle
    vehicle_type: VehicleType = VehicleType.sedan
    vehicle_make: str | None = None
    vehicle_model: str | None = None
    vehicle_year: int | None = None
    vehicle_color: str | None = None
    license_plate: str | None = None

    # Services
    selected_services: tuple[str, ...] = ()
    services_total: float = 0

    # Location
    address: str = ""
    coordinates: Coordinates | None = None

    payment_method: PaymentMethod = PaymentMethod.cash
    notes: str = ""

    final_price: float = 0

    def merged(self, **partial: Any) -> BookingDraft:
        """Shallow merge: keys in `partial` replace the current values, the rest are kept."""
        unknown = set(partial) - DRAFT_FIELDS
        if unknown:
            raise TypeError(f"Unknown booking draft fields: {', '.join(sorted(unknown))}")
        return replace(self, **partial)


DRAFT_FIELDS: frozenset[str] = frozenset(f.name for f in fields(BookingDraft))

# Checked again right before submission, in this order
REQUIRED_FOR_SUBMISSION: tuple[str, ...] = ("worker_id", "service_id", "date", "time", "address")


def missing_required_fields(draft: BookingDraft) -> list[str]:
    return [name for name in REQUIRED_FOR_SUBMISSION if not getattr(draft, name)]
