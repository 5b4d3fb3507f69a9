"""
End-to-end tests for the wizard HTTP API.
"""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from washbook.application.use_cases.submit_booking import SubmitBookingUseCase
from washbook.application.use_cases.wizard import BookingWizardUseCase
from washbook.infrastructure.backend.mock_backend import MockBookingBackend
from washbook.main import ContextFormatter, app
from washbook.wiring.dependencies import get_submit_booking_use_case, get_wizard_use_case

BASE = "/api/v1/wizard"


@pytest.fixture
def client(store, catalog, geocoder):
    backend = MockBookingBackend()
    wizard = BookingWizardUseCase(store=store, catalog=catalog, geocoder=geocoder)
    submitter = SubmitBookingUseCase(store=store, backend=backend)
    app.dependency_overrides[get_wizard_use_case] = lambda: wizard
    app.dependency_overrides[get_submit_booking_use_case] = lambda: submitter
    with TestClient(app) as test_client:
        test_client.backend = backend
        yield test_client
    app.dependency_overrides.clear()


def _walk(client: TestClient, session_id: str = "s1") -> None:
    r = client.post(f"{BASE}/{session_id}/start", json={"worker_id": "w1", "worker_name": "Ahmed", "service_key": "basic"})
    assert r.status_code == 200
    r = client.post(f"{BASE}/{session_id}/steps/1", json={"date": "2026-11-02", "time": "10:30"})
    assert r.status_code == 200
    r = client.post(f"{BASE}/{session_id}/steps/2", json={"vehicle_type": "sedan"})
    assert r.status_code == 200
    r = client.post(f"{BASE}/{session_id}/steps/3", json={"selected_services": ["basic", "pro"]})
    assert r.status_code == 200
    assert r.json()["draft"]["services_total"] == 320
    r = client.post(
        f"{BASE}/{session_id}/steps/4",
        json={"address": "12 Rue Ibn Sina, Rabat", "coordinates": {"latitude": 33.97, "longitude": -6.85}},
    )
    assert r.status_code == 200
    assert r.json()["route"] == "BookingPayment"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_full_booking_flow(client):
    _walk(client)

    r = client.post(f"{BASE}/s1/submit", json={"payment_method": "cash"}, headers={"X-Customer-Id": "c1"})

    assert r.status_code == 200
    body = r.json()
    assert body["confirmation_id"] == "WB-000001"
    assert body["route"] == "BookingConfirmation"
    assert body["payment_status"] == "created"

    view = client.get(f"{BASE}/s1").json()
    assert view["current_step"] == 1
    assert view["draft"]["worker_id"] == ""


def test_step_validation_returns_422_with_fields(client):
    client.post(f"{BASE}/s1/start", json={"worker_id": "w1"})

    r = client.post(f"{BASE}/s1/steps/1", json={"date": "2026-11-02"})

    assert r.status_code == 422
    assert r.json()["detail"]["fields"] == ["time"]
    assert client.get(f"{BASE}/s1").json()["draft"]["date"] == ""


def test_out_of_order_step_returns_409(client):
    client.post(f"{BASE}/s1/start", json={"worker_id": "w1"})

    r = client.post(f"{BASE}/s1/steps/3", json={"selected_services": ["basic"]})

    assert r.status_code == 409


def test_unknown_service_on_start_returns_404(client):
    r = client.post(f"{BASE}/s1/start", json={"worker_id": "w1", "service_key": "ceramic"})

    assert r.status_code == 404


def test_submit_without_customer_returns_401(client):
    _walk(client)

    r = client.post(f"{BASE}/s1/submit", json={"payment_method": "cash"})

    assert r.status_code == 401


def test_submit_with_missing_fields_returns_422(client):
    client.post(f"{BASE}/s1/start", json={"worker_id": "w1"})

    r = client.post(f"{BASE}/s1/submit", json={}, headers={"X-Customer-Id": "c1"})

    assert r.status_code == 422
    assert "date" in r.json()["detail"]["fields"]
    assert client.backend.bookings == {}


def test_booking_failure_returns_502_and_keeps_draft(client):
    _walk(client)
    client.backend.fail_booking_with = "Access denied. Please check your permissions."
    before = client.get(f"{BASE}/s1").json()

    r = client.post(f"{BASE}/s1/submit", json={"payment_method": "cash"}, headers={"X-Customer-Id": "c1"})

    assert r.status_code == 502
    assert r.json()["detail"] == "Access denied. Please check your permissions."
    assert client.get(f"{BASE}/s1").json() == before


def test_payment_failure_is_not_surfaced(client):
    _walk(client)
    client.backend.fail_payment_with = "payments insert failed"

    r = client.post(f"{BASE}/s1/submit", json={"payment_method": "cash"}, headers={"X-Customer-Id": "c1"})

    assert r.status_code == 200
    assert r.json()["confirmation_id"] == "WB-000001"
    assert "payments insert failed" not in r.text


def test_idempotency_key_header(client):
    _walk(client)
    headers = {"X-Customer-Id": "c1", "Idempotency-Key": "tap-1"}

    first = client.post(f"{BASE}/s1/submit", json={}, headers=headers)
    second = client.post(f"{BASE}/s1/submit", json={}, headers=headers)

    assert first.json() == second.json()
    assert len(client.backend.bookings) == 1


def test_back_and_cancel(client):
    _walk(client)

    assert client.post(f"{BASE}/s1/back").json()["current_step"] == 4
    r = client.post(f"{BASE}/s1/cancel")
    assert r.json()["current_step"] == 1
    assert r.json()["draft"]["address"] == ""


def test_list_services_with_vehicle_pricing(client):
    r = client.get(f"{BASE}/services", params={"vehicle_type": "van"})

    prices = {item["key"]: item["price"] for item in r.json()}
    assert prices["basic"] == 84
    assert client.get(f"{BASE}/services", params={"vehicle_type": "boat"}).status_code == 400


def test_suggest_location(client):
    r = client.post(f"{BASE}/location/suggest", json={"latitude": 31.63, "longitude": -8.01})

    assert r.status_code == 200
    assert r.json()["resolved"] is True
    assert r.json()["coordinates"] == {"latitude": 31.63, "longitude": -8.01}


def test_start_by_service_id(client):
    r = client.post(f"{BASE}/s1/start", json={"worker_id": "w1", "service_id": "deluxe"})

    assert r.status_code == 200
    assert r.json()["draft"]["service_name"] == "Deluxe Wash"


def test_same_idempotency_key_in_two_sessions_books_both(client):
    _walk(client, "s1")
    _walk(client, "s2")

    first = client.post(
        f"{BASE}/s1/submit", json={}, headers={"X-Customer-Id": "c1", "Idempotency-Key": "tap-1"}
    )
    second = client.post(
        f"{BASE}/s2/submit", json={}, headers={"X-Customer-Id": "c2", "Idempotency-Key": "tap-1"}
    )

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["booking_id"] != second.json()["booking_id"]
    assert len(client.backend.bookings) == 2


def test_context_formatter_appends_known_extras():
    formatter = ContextFormatter("%(levelname)s:%(name)s:%(message)s")
    record = logging.LogRecord("washbook", logging.INFO, __file__, 1, "Booking step completed", None, None)
    record.worker_id = "w1"
    record.fields = ["date", "time"]
    record.booking_number = "WB-000001"
    record.table = "bookings"
    record.status = 403

    line = formatter.format(record)

    assert line.startswith("INFO:washbook:Booking step completed | ")
    for fragment in (
        "worker_id=w1",
        "fields=['date', 'time']",
        "booking_number=WB-000001",
        "table=bookings",
        "status=403",
    ):
        assert fragment in line
