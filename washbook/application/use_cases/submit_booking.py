from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import OrderedDict, deque
from typing import Any

from washbook.application.exceptions import (
    AuthenticationRequiredError,
    MissingFieldsError,
    StepOrderError,
    StepValidationError,
    SubmissionInProgressError,
)
from washbook.application.ports.booking_backend import BookingBackendPort
from washbook.application.ports.draft_store import DraftStorePort
from washbook.domain.entities.booking import Booking, NewBooking, NewPayment, Payment, SubmissionResult
from washbook.domain.entities.booking_draft import (
    ENABLED_PAYMENT_METHODS,
    BookingDraft,
    PaymentMethod,
    VehicleType,
    missing_required_fields,
)
from washbook.domain.entities.wizard_step import WizardStep


class SubmitBookingUseCase:
    """
    Final step of the wizard: turn the draft into a booking and a payment record.

    The booking is the success criterion. The payment record is a best-effort
    second write; its failure is logged and reported in the result but never
    raised. The draft is only reset once the booking exists.

    Results are replayed only for caller-supplied idempotency keys, scoped to
    the session and customer that first used them, and kept for a bounded
    time and count.
    """

    def __init__(
        self,
        store: DraftStorePort,
        backend: BookingBackendPort,
        platform_fee_percentage: float | None = None,
        default_duration: int = 60,
        result_ttl_seconds: float = 24 * 60 * 60,
        max_stored_results: int = 1000,
        max_missing_payments: int = 1000,
    ) -> None:
        self._store = store
        self._backend = backend
        self._platform_fee_percentage = platform_fee_percentage
        self._default_duration = default_duration
        self._result_ttl_seconds = result_ttl_seconds
        self._max_stored_results = max_stored_results
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()
        self._results: OrderedDict[tuple[str, str, str], tuple[float, SubmissionResult]] = OrderedDict()
        self._missing_payments: deque[SubmissionResult] = deque(maxlen=max_missing_payments)
        self._logger = logging.getLogger(__name__)

    def submit(
        self,
        session_id: str,
        customer_id: str | None,
        payment_method: PaymentMethod | str = PaymentMethod.cash,
        idempotency_key: str | None = None,
    ) -> SubmissionResult:
        method = _as_payment_method(payment_method)
        if method is None or method not in ENABLED_PAYMENT_METHODS:
            raise StepValidationError("Missing fields", "Please select a payment method", ["payment_method"])

        if not customer_id:
            raise AuthenticationRequiredError("Please sign in to create a booking")

        # The slot is held from the first read of the draft until the result is stored
        with self._lock:
            if session_id in self._in_flight:
                raise SubmissionInProgressError("A booking is already being created for this session")
            self._in_flight.add(session_id)

        try:
            return self._submit_in_slot(session_id, customer_id, method, idempotency_key)
        finally:
            with self._lock:
                self._in_flight.discard(session_id)

    def is_submitting(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._in_flight

    def bookings_missing_payment(self) -> list[SubmissionResult]:
        """Most recent bookings created in this process whose payment record could not be written."""
        with self._lock:
            return list(self._missing_payments)

    def _submit_in_slot(
        self,
        session_id: str,
        customer_id: str,
        method: PaymentMethod,
        idempotency_key: str | None,
    ) -> SubmissionResult:
        replay_key = (session_id, customer_id, idempotency_key) if idempotency_key else None
        if replay_key is not None:
            previous = self._stored_result(replay_key)
            if previous is not None:
                self._logger.info(
                    "Duplicate submission ignored",
                    extra={"session_id": session_id, "booking_id": previous.booking.id},
                )
                return previous

        draft = self._store.read(session_id)
        missing = missing_required_fields(draft)
        if missing:
            self._logger.warning(
                "Booking submission blocked by missing fields",
                extra={"session_id": session_id, "missing": missing},
            )
            raise MissingFieldsError(missing)

        current = self._store.get_step(session_id)
        if current != WizardStep.PAYMENT:
            raise StepOrderError(f"Cannot submit from step {current}")

        result = self._submit(session_id, customer_id, draft, method, idempotency_key or uuid.uuid4().hex)

        with self._lock:
            if result.payment_status == "failed":
                self._missing_payments.append(result)
            if replay_key is not None:
                self._store_result(replay_key, result)
        return result

    def _stored_result(self, replay_key: tuple[str, str, str]) -> SubmissionResult | None:
        with self._lock:
            self._prune_results(time.monotonic())
            entry = self._results.get(replay_key)
        return entry[1] if entry is not None else None

    def _store_result(self, replay_key: tuple[str, str, str], result: SubmissionResult) -> None:
        # Caller holds self._lock
        now = time.monotonic()
        self._prune_results(now)
        self._results[replay_key] = (now, result)
        while len(self._results) > self._max_stored_results:
            self._results.popitem(last=False)

    def _prune_results(self, now: float) -> None:
        while self._results:
            stored_at, _ = next(iter(self._results.values()))
            if now - stored_at < self._result_ttl_seconds:
                break
            self._results.popitem(last=False)

    def _submit(
        self,
        session_id: str,
        customer_id: str,
        draft: BookingDraft,
        method: PaymentMethod,
        key: str,
    ) -> SubmissionResult:
        try:
            booking = self._backend.create_booking(customer_id, self._to_new_booking(draft))
        except Exception as e:
            self._logger.error("Error creating booking", extra={"session_id": session_id, "error": str(e)})
            raise

        self._logger.info(
            "Booking created",
            extra={"session_id": session_id, "booking_id": booking.id, "booking_number": booking.booking_number},
        )

        payment, payment_error = self._create_payment(booking, customer_id, draft, method)
        self._store.reset(session_id)

        return SubmissionResult(
            booking=booking,
            payment=payment,
            payment_status="created" if payment is not None else "failed",
            idempotency_key=key,
            payment_error=payment_error,
        )

    def _create_payment(
        self,
        booking: Booking,
        customer_id: str,
        draft: BookingDraft,
        method: PaymentMethod,
    ) -> tuple[Payment | None, str | None]:
        request = NewPayment(
            booking_id=booking.id,
            customer_id=customer_id,
            worker_id=draft.worker_id,
            amount=draft.final_price,
            payment_method=method,
            platform_fee_percentage=self._platform_fee_percentage,
        )
        try:
            payment = self._backend.create_payment(request)
        except Exception as e:
            self._logger.warning(
                "Booking was created but payment record is missing",
                extra={"booking_id": booking.id, "payment_status": "failed", "error": str(e)},
            )
            return None, str(e)

        self._logger.info(
            "Payment record created",
            extra={"booking_id": booking.id, "payment_id": payment.id, "payment_status": payment.status},
        )
        return payment, None

    def _to_new_booking(self, draft: BookingDraft) -> NewBooking:
        return NewBooking(
            worker_id=draft.worker_id,
            service_id=draft.service_id,
            scheduled_date=draft.date,
            scheduled_time=draft.time,
            service_address_text=draft.address,
            vehicle_type=draft.vehicle_type or VehicleType.sedan,
            vehicle_make=draft.vehicle_make,
            vehicle_model=draft.vehicle_model,
            vehicle_year=draft.vehicle_year,
            vehicle_color=draft.vehicle_color,
            license_plate=draft.license_plate,
            base_price=draft.base_price,
            total_price=draft.final_price,
            special_instructions=draft.notes or None,
            estimated_duration=draft.estimated_duration or self._default_duration,
            service_location=draft.coordinates,
        )


def _as_payment_method(value: Any) -> PaymentMethod | None:
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(value)
    except ValueError:
        return None
