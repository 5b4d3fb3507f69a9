from __future__ import annotations

import pytest

from washbook.application.use_cases.submit_booking import SubmitBookingUseCase
from washbook.application.use_cases.wizard import BookingWizardUseCase
from washbook.domain.entities.wizard_step import WizardStep
from washbook.infrastructure.backend.mock_backend import MockBookingBackend
from washbook.infrastructure.catalog.static_catalog import StaticServiceCatalog
from washbook.infrastructure.geocoding.mock_geocoder import MockGeocoder
from washbook.infrastructure.store.memory_store import MemoryDraftStore


@pytest.fixture
def store() -> MemoryDraftStore:
    return MemoryDraftStore()


@pytest.fixture
def catalog() -> StaticServiceCatalog:
    return StaticServiceCatalog()


@pytest.fixture
def backend() -> MockBookingBackend:
    return MockBookingBackend()


@pytest.fixture
def geocoder() -> MockGeocoder:
    return MockGeocoder()


@pytest.fixture
def wizard(store, catalog, geocoder) -> BookingWizardUseCase:
    return BookingWizardUseCase(store=store, catalog=catalog, geocoder=geocoder)


@pytest.fixture
def submitter(store, backend) -> SubmitBookingUseCase:
    return SubmitBookingUseCase(store=store, backend=backend)


@pytest.fixture
def walk_to_payment(wizard):
    """Start a session for worker w1 / service basic and complete steps 1-4."""

    def _walk(session_id: str = "s1") -> None:
        wizard.start(session_id, worker_id="w1", worker_name="Ahmed", base_price=80, service_key="basic")
        wizard.continue_step(session_id, WizardStep.DATETIME, {"date": "2026-11-02", "time": "10:30"})
        wizard.continue_step(session_id, WizardStep.VEHICLE, {"vehicle_type": "suv", "vehicle_make": "Dacia"})
        wizard.continue_step(session_id, WizardStep.SERVICES, {"selected_services": ["basic", "deluxe"]})
        wizard.continue_step(session_id, WizardStep.LOCATION, {"address": "12 Rue Ibn Sina, Rabat"})

    return _walk
