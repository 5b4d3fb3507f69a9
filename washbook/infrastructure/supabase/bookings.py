from __future__ import annotations

import logging
from typing import Any

from washbook.application.ports.booking_backend import BookingBackendPort
from washbook.domain.entities.booking import Booking, NewBooking, NewPayment, Payment
from washbook.infrastructure.supabase.rest_client import SupabaseRestClient

DEFAULT_PLATFORM_FEE_PERCENTAGE = 15.0
DEFAULT_CURRENCY = "MAD"


def booking_row(customer_id: str, booking: NewBooking) -> dict[str, Any]:
    location = booking.service_location
    return {
        "customer_id": customer_id,
        "worker_id": booking.worker_id,
        "service_id": booking.service_id,
        "scheduled_date": booking.scheduled_date,
        "scheduled_time": booking.scheduled_time,
        "estimated_duration": booking.estimated_duration,
        "service_address_text": booking.service_address_text,
        "vehicle_type": booking.vehicle_type.value,
        "vehicle_make": booking.vehicle_make,
        "vehicle_model": booking.vehicle_model,
        "vehicle_year": booking.vehicle_year,
        "vehicle_color": booking.vehicle_color,
        "license_plate": booking.license_plate,
        "base_price": booking.base_price,
        "total_price": booking.total_price,
        "special_instructions": booking.special_instructions,
        # PostGIS takes longitude first
        "service_location": f"POINT({location.longitude} {location.latitude})" if location else None,
    }


def split_amount(amount: float, fee_percentage: float) -> tuple[float, float]:
    """(platform_fee, worker_earnings) for a payment amount."""
    platform_fee = amount * fee_percentage / 100
    return platform_fee, amount - platform_fee


class SupabaseBookingBackend(BookingBackendPort):
    def __init__(
        self,
        client: SupabaseRestClient,
        platform_fee_percentage: float = DEFAULT_PLATFORM_FEE_PERCENTAGE,
        currency: str = DEFAULT_CURRENCY,
    ) -> None:
        self._client = client
        self._platform_fee_percentage = platform_fee_percentage
        self._currency = currency
        self._logger = logging.getLogger(__name__)

    def create_booking(self, customer_id: str, booking: NewBooking) -> Booking:
        row = self._client.insert_one("bookings", booking_row(customer_id, booking))
        return Booking(
            id=str(row["id"]),
            booking_number=row.get("booking_number"),
            status=row.get("status") or "pending",
            customer_id=row.get("customer_id"),
            worker_id=row.get("worker_id"),
            total_price=row.get("total_price"),
            raw=row,
        )

    def create_payment(self, payment: NewPayment) -> Payment:
        fee_percentage = payment.platform_fee_percentage or self._platform_fee_percentage
        platform_fee, worker_earnings = split_amount(payment.amount, fee_percentage)
        row = self._client.insert_one(
            "payments",
            {
                "booking_id": payment.booking_id,
                "customer_id": payment.customer_id,
                "worker_id": payment.worker_id,
                "amount": payment.amount,
                "currency": self._currency,
                "payment_method": payment.payment_method.value,
                "status": "pending",
                "platform_fee": platform_fee,
                "worker_earnings": worker_earnings,
                "gateway_transaction_id": None,
                "gateway_reference": None,
                "gateway_response": None,
                "processed_at": None,
            },
        )
        self._logger.info(
            "Payment record stored",
            extra={"booking_id": payment.booking_id, "platform_fee": platform_fee},
        )
        return Payment(
            id=str(row["id"]),
            booking_id=str(row.get("booking_id", payment.booking_id)),
            status=row.get("status") or "pending",
            amount=row.get("amount", payment.amount),
            currency=row.get("currency") or self._currency,
            payment_method=row.get("payment_method") or payment.payment_method.value,
            platform_fee=row.get("platform_fee", platform_fee),
            worker_earnings=row.get("worker_earnings", worker_earnings),
            raw=row,
        )
