from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from washbook.domain.entities.booking_draft import Coordinates, PaymentMethod, VehicleType


@dataclass(frozen=True)
class NewBooking:
    """Payload for the "create booking" call, one field per bookings column."""

    worker_id: str
    service_id: str
    scheduled_date: str
    scheduled_time: str
    service_address_text: str
    vehicle_type: VehicleType
    base_price: float
    total_price: float
    estimated_duration: int
    vehicle_make: str | None = None
    vehicle_model: str | None = None
    vehicle_year: int | None = None
    vehicle_color: str | None = None
    license_plate: str | None = None
    special_instructions: str | None = None
    service_location: Coordinates | None = None


@dataclass(frozen=True)
class NewPayment:
    booking_id: str
    customer_id: str
    worker_id: str
    amount: float
    payment_method: PaymentMethod
    platform_fee_percentage: float | None = None


@dataclass(frozen=True)
class Booking:
    id: str
    booking_number: str | None = None
    status: str = "pending"
    customer_id: str | None = None
    worker_id: str | None = None
    total_price: float | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Payment:
    id: str
    booking_id: str
    status: str = "pending"  # "pending", "processing", "completed", "failed", "refunded"
    amount: float = 0
    currency: str = "MAD"
    payment_method: str = "cash"
    platform_fee: float = 0
    worker_earnings: float = 0
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class SubmissionResult:
    booking: Booking
    payment: Payment | None
    payment_status: str  # "created" or "failed"; the booking stands either way
    idempotency_key: str
    payment_error: str | None = None

    @property
    def confirmation_id(self) -> str:
        return self.booking.booking_number or self.booking.id
