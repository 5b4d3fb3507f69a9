from __future__ import annotations

import logging
import uuid

from washbook.application.exceptions import BackendError
from washbook.application.ports.booking_backend import BookingBackendPort
from washbook.domain.entities.booking import Booking, NewBooking, NewPayment, Payment
from washbook.infrastructure.supabase.bookings import DEFAULT_PLATFORM_FEE_PERCENTAGE, split_amount


class MockBookingBackend(BookingBackendPort):
    def __init__(
        self,
        fail_booking_with: str | None = None,
        fail_payment_with: str | None = None,
    ) -> None:
        self.bookings: dict[str, tuple[str, NewBooking]] = {}
        self.payments: dict[str, NewPayment] = {}
        self.fail_booking_with = fail_booking_with
        self.fail_payment_with = fail_payment_with
        self._logger = logging.getLogger(__name__)

    def create_booking(self, customer_id: str, booking: NewBooking) -> Booking:
        if self.fail_booking_with:
            raise BackendError(self.fail_booking_with, code="MOCK")
        booking_id = str(uuid.uuid4())
        self.bookings[booking_id] = (customer_id, booking)
        booking_number = f"WB-{len(self.bookings):06d}"
        self._logger.info(
            "Mock booking created",
            extra={"booking_id": booking_id, "booking_number": booking_number},
        )
        return Booking(
            id=booking_id,
            booking_number=booking_number,
            customer_id=customer_id,
            worker_id=booking.worker_id,
            total_price=booking.total_price,
        )

    def create_payment(self, payment: NewPayment) -> Payment:
        if self.fail_payment_with:
            raise BackendError(self.fail_payment_with, code="MOCK")
        payment_id = str(uuid.uuid4())
        self.payments[payment_id] = payment
        platform_fee, worker_earnings = split_amount(
            payment.amount, payment.platform_fee_percentage or DEFAULT_PLATFORM_FEE_PERCENTAGE
        )
        return Payment(
            id=payment_id,
            booking_id=payment.booking_id,
            amount=payment.amount,
            payment_method=payment.payment_method.value,
            platform_fee=platform_fee,
            worker_earnings=worker_earnings,
        )
