from __future__ import annotations

from abc import ABC, abstractmethod

from washbook.domain.entities.booking import Booking, NewBooking, NewPayment, Payment


class BookingBackendPort(ABC):
    @abstractmethod
    def create_booking(self, customer_id: str, booking: NewBooking) -> Booking:
        """Insert a booking row. Raises BackendError on rejection (RLS, validation, network)."""
        raise NotImplementedError

    @abstractmethod
    def create_payment(self, payment: NewPayment) -> Payment:
        """Insert the pending payment row for a booking. Raises BackendError on failure."""
        raise NotImplementedError
