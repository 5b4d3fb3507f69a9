"""
Tests for the submission boundary: booking first, payment best-effort.
"""

from __future__ import annotations

import threading

import pytest

from washbook.application.exceptions import (
    AuthenticationRequiredError,
    BackendError,
    MissingFieldsError,
    StepOrderError,
    StepValidationError,
    SubmissionInProgressError,
)
from washbook.application.use_cases.submit_booking import SubmitBookingUseCase
from washbook.application.use_cases.wizard import BookingWizardUseCase
from washbook.domain.entities.booking import Booking, NewBooking, NewPayment, Payment
from washbook.domain.entities.booking_draft import BookingDraft, PaymentMethod, VehicleType
from washbook.domain.entities.wizard_step import WizardStep
from washbook.infrastructure.backend.mock_backend import MockBookingBackend
from washbook.infrastructure.catalog.static_catalog import StaticServiceCatalog
from washbook.infrastructure.store.memory_store import MemoryDraftStore


def test_successful_submission_resets_draft(submitter, backend, store, walk_to_payment):
    walk_to_payment("s1")

    result = submitter.submit("s1", customer_id="c1", payment_method="cash")

    assert result.booking.booking_number == "WB-000001"
    assert result.confirmation_id == "WB-000001"
    assert result.payment_status == "created"
    assert result.payment is not None
    assert store.read("s1") == BookingDraft()
    assert store.get_step("s1") == WizardStep.DATETIME


def test_booking_request_is_mapped_from_draft(submitter, backend, walk_to_payment):
    walk_to_payment("s1")

    submitter.submit("s1", customer_id="c1")

    [(customer_id, booking)] = backend.bookings.values()
    assert customer_id == "c1"
    assert isinstance(booking, NewBooking)
    assert booking.worker_id == "w1"
    assert booking.service_id == "basic"
    assert booking.scheduled_date == "2026-11-02"
    assert booking.scheduled_time == "10:30"
    assert booking.service_address_text == "12 Rue Ibn Sina, Rabat"
    assert booking.vehicle_type == VehicleType.suv
    assert booking.vehicle_make == "Dacia"
    assert booking.base_price == 80
    # suv pricing: 72 + 144
    assert booking.total_price == 216
    assert booking.estimated_duration == 30
    assert booking.special_instructions is None


def test_payment_references_booking(submitter, backend, walk_to_payment):
    walk_to_payment("s1")

    result = submitter.submit("s1", customer_id="c1")

    [payment] = backend.payments.values()
    assert payment.booking_id == result.booking.id
    assert payment.customer_id == "c1"
    assert payment.worker_id == "w1"
    assert payment.amount == 216
    assert payment.payment_method == PaymentMethod.cash
    assert result.payment.platform_fee == pytest.approx(32.4)
    assert result.payment.worker_earnings == pytest.approx(183.6)


def test_missing_fields_block_submission_without_backend_call(wizard, submitter, backend, store):
    wizard.start("s1", worker_id="w1")
    store.set_step("s1", WizardStep.SERVICES)
    view = wizard.continue_step("s1", WizardStep.SERVICES, {"selected_services": ["basic", "deluxe"]})
    assert view.draft.services_total == 180

    with pytest.raises(MissingFieldsError) as exc_info:
        submitter.submit("s1", customer_id="c1")

    assert "date" in exc_info.value.missing
    assert exc_info.value.missing == ["service_id", "date", "time", "address"]
    assert "date" in exc_info.value.message
    assert backend.bookings == {}


def test_booking_failure_keeps_draft_and_step(store, walk_to_payment):
    backend = MockBookingBackend(fail_booking_with="new row violates row-level security policy")
    submitter = SubmitBookingUseCase(store=store, backend=backend)
    walk_to_payment("s1")
    before = store.read("s1")

    with pytest.raises(BackendError) as exc_info:
        submitter.submit("s1", customer_id="c1")

    assert exc_info.value.message == "new row violates row-level security policy"
    assert store.read("s1") == before
    assert store.get_step("s1") == WizardStep.PAYMENT
    assert not submitter.is_submitting("s1")


def test_payment_failure_still_confirms_booking(store, walk_to_payment):
    backend = MockBookingBackend(fail_payment_with="payments insert failed")
    submitter = SubmitBookingUseCase(store=store, backend=backend)
    walk_to_payment("s1")

    result = submitter.submit("s1", customer_id="c1")

    assert result.confirmation_id == "WB-000001"
    assert result.payment is None
    assert result.payment_status == "failed"
    assert result.payment_error == "payments insert failed"
    assert store.read("s1") == BookingDraft()
    assert submitter.bookings_missing_payment() == [result]


def test_payment_failure_of_any_kind_is_swallowed(store, walk_to_payment):
    class ExplodingPayments(MockBookingBackend):
        def create_payment(self, payment: NewPayment) -> Payment:
            raise RuntimeError("connection reset")

    submitter = SubmitBookingUseCase(store=store, backend=ExplodingPayments())
    walk_to_payment("s1")

    result = submitter.submit("s1", customer_id="c1")

    assert result.payment_status == "failed"
    assert result.booking.id


def test_only_cash_is_enabled(submitter, backend, walk_to_payment):
    walk_to_payment("s1")

    for method in ("card", "mobile", "wallet", "bitcoin"):
        with pytest.raises(StepValidationError):
            submitter.submit("s1", customer_id="c1", payment_method=method)
    assert backend.bookings == {}


def test_customer_is_required(submitter, walk_to_payment):
    walk_to_payment("s1")

    with pytest.raises(AuthenticationRequiredError):
        submitter.submit("s1", customer_id=None)


def test_submission_requires_payment_step(submitter, store, walk_to_payment):
    walk_to_payment("s1")
    store.set_step("s1", WizardStep.LOCATION)

    with pytest.raises(StepOrderError):
        submitter.submit("s1", customer_id="c1")


def test_repeated_idempotency_key_creates_one_booking(submitter, backend, walk_to_payment):
    walk_to_payment("s1")

    first = submitter.submit("s1", customer_id="c1", idempotency_key="tap-1")
    second = submitter.submit("s1", customer_id="c1", idempotency_key="tap-1")

    assert second is first
    assert len(backend.bookings) == 1


def test_fresh_key_generated_per_attempt(submitter, walk_to_payment):
    walk_to_payment("s1")
    first = submitter.submit("s1", customer_id="c1")
    walk_to_payment("s1")
    second = submitter.submit("s1", customer_id="c1")

    assert first.idempotency_key != second.idempotency_key
    assert first.booking.id != second.booking.id


def test_second_submission_while_in_flight_is_rejected(store, walk_to_payment):
    class ReentrantBackend(MockBookingBackend):
        submitter: SubmitBookingUseCase | None = None
        nested_error: Exception | None = None

        def create_booking(self, customer_id: str, booking: NewBooking) -> Booking:
            try:
                self.submitter.submit("s1", customer_id=customer_id)
            except SubmissionInProgressError as e:
                self.nested_error = e
            return super().create_booking(customer_id, booking)

    backend = ReentrantBackend()
    submitter = SubmitBookingUseCase(store=store, backend=backend)
    backend.submitter = submitter
    walk_to_payment("s1")

    submitter.submit("s1", customer_id="c1")

    assert isinstance(backend.nested_error, SubmissionInProgressError)
    assert len(backend.bookings) == 1


def test_idempotency_key_is_scoped_to_session_and_customer(submitter, backend, store, walk_to_payment):
    """Another session sending the same key gets its own booking, not the first one."""
    walk_to_payment("s1")
    walk_to_payment("s2")

    first = submitter.submit("s1", customer_id="c1", idempotency_key="tap-1")
    second = submitter.submit("s2", customer_id="c2", idempotency_key="tap-1")

    assert second.booking.id != first.booking.id
    assert second.booking.customer_id == "c2"
    assert len(backend.bookings) == 2
    assert store.read("s2") == BookingDraft()


def test_same_key_from_another_customer_is_not_replayed(submitter, backend, walk_to_payment):
    walk_to_payment("s1")
    submitter.submit("s1", customer_id="c1", idempotency_key="tap-1")

    # The draft was reset by the first submission, so nothing is left to book
    with pytest.raises(MissingFieldsError):
        submitter.submit("s1", customer_id="c2", idempotency_key="tap-1")
    assert len(backend.bookings) == 1


class PausingStore(MemoryDraftStore):
    """Blocks the next draft read until `resume` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.pause_next_read = False
        self.reading = threading.Event()
        self.resume = threading.Event()

    def read(self, session_id: str) -> BookingDraft:
        if self.pause_next_read:
            self.pause_next_read = False
            self.reading.set()
            self.resume.wait(timeout=5)
        return super().read(session_id)


def _walk(wizard: BookingWizardUseCase, session_id: str) -> None:
    wizard.start(session_id, worker_id="w1", base_price=80, service_key="basic")
    wizard.continue_step(session_id, WizardStep.DATETIME, {"date": "2026-11-02", "time": "10:30"})
    wizard.continue_step(session_id, WizardStep.VEHICLE, {"vehicle_type": "sedan"})
    wizard.continue_step(session_id, WizardStep.SERVICES, {"selected_services": ["basic"]})
    wizard.continue_step(session_id, WizardStep.LOCATION, {"address": "12 Rue Ibn Sina, Rabat"})


def test_concurrent_submission_is_rejected_while_draft_is_read():
    """A second request cannot snapshot the draft while the first one holds the session."""
    store = PausingStore()
    backend = MockBookingBackend()
    submitter = SubmitBookingUseCase(store=store, backend=backend)
    _walk(BookingWizardUseCase(store=store, catalog=StaticServiceCatalog()), "s1")
    errors: list[Exception] = []

    def first_tap() -> None:
        try:
            submitter.submit("s1", customer_id="c1")
        except Exception as e:
            errors.append(e)

    store.pause_next_read = True
    worker = threading.Thread(target=first_tap)
    worker.start()
    assert store.reading.wait(timeout=5)

    with pytest.raises(SubmissionInProgressError):
        submitter.submit("s1", customer_id="c1")

    store.resume.set()
    worker.join(timeout=5)

    assert errors == []
    assert len(backend.bookings) == 1
    with pytest.raises(MissingFieldsError):
        submitter.submit("s1", customer_id="c1")
    assert len(backend.bookings) == 1


def test_generated_keys_are_not_kept(submitter, walk_to_payment):
    walk_to_payment("s1")

    submitter.submit("s1", customer_id="c1")

    assert len(submitter._results) == 0


def test_stored_results_are_bounded(store, backend, walk_to_payment):
    submitter = SubmitBookingUseCase(store=store, backend=backend, max_stored_results=1)
    walk_to_payment("s1")
    first = submitter.submit("s1", customer_id="c1", idempotency_key="k1")
    walk_to_payment("s2")
    submitter.submit("s2", customer_id="c1", idempotency_key="k2")

    walk_to_payment("s1")
    again = submitter.submit("s1", customer_id="c1", idempotency_key="k1")

    assert again.booking.id != first.booking.id
    assert len(submitter._results) == 1


def test_stored_results_expire(store, backend, walk_to_payment):
    submitter = SubmitBookingUseCase(store=store, backend=backend, result_ttl_seconds=0)
    walk_to_payment("s1")
    first = submitter.submit("s1", customer_id="c1", idempotency_key="k1")

    walk_to_payment("s1")
    again = submitter.submit("s1", customer_id="c1", idempotency_key="k1")

    assert again.booking.id != first.booking.id
    assert len(backend.bookings) == 2


def test_missing_payment_list_keeps_most_recent(store, walk_to_payment):
    backend = MockBookingBackend(fail_payment_with="payments insert failed")
    submitter = SubmitBookingUseCase(store=store, backend=backend, max_missing_payments=1)
    walk_to_payment("s1")
    submitter.submit("s1", customer_id="c1")
    walk_to_payment("s1")
    latest = submitter.submit("s1", customer_id="c1")

    assert submitter.bookings_missing_payment() == [latest]
