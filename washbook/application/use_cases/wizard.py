from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from washbook.application.exceptions import CatalogLookupError, StepOrderError, StepValidationError
from washbook.application.ports.draft_store import DraftStorePort
from washbook.application.ports.geocoder import GeocoderPort
from washbook.application.ports.service_catalog import ServiceCatalogPort
from washbook.application.utils.field_rules import (
    clean_optional_text,
    is_valid_vehicle_year,
    parse_coordinates,
    parse_hhmm,
    parse_iso_date,
    parse_vehicle_type,
)
from washbook.application.utils.pricing import services_total, unique_keys, unknown_service_keys
from washbook.domain.entities.booking_draft import BookingDraft, Coordinates, VehicleType
from washbook.domain.entities.service_catalog import ServiceItem
from washbook.domain.entities.wizard_step import TOTAL_STEPS, WizardStep

CURRENT_LOCATION_PLACEHOLDER = "Current location"


@dataclass(frozen=True)
class WizardView:
    draft: BookingDraft
    current_step: WizardStep
    total_steps: int = TOTAL_STEPS

    @property
    def route(self) -> str:
        return self.current_step.route


@dataclass(frozen=True)
class LocationSuggestion:
    address: str
    coordinates: Coordinates | None
    resolved: bool  # False when the placeholder is returned


class BookingWizardUseCase:
    """
    Drives the five booking steps over a per-session draft.

    Every step follows the same contract: validate the submitted slice, and
    only when it is valid merge it into the draft and advance the step.
    Invalid input raises StepValidationError and leaves the draft as it was.
    """

    def __init__(
        self,
        store: DraftStorePort,
        catalog: ServiceCatalogPort,
        geocoder: GeocoderPort | None = None,
        default_base_price: float = 80,
        default_duration: int = 60,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._geocoder = geocoder
        self._default_base_price = default_base_price
        self._default_duration = default_duration
        self._logger = logging.getLogger(__name__)

    def start(
        self,
        session_id: str,
        worker_id: str,
        worker_name: str = "",
        base_price: float | None = None,
        service_key: str | None = None,
        service_id: str | None = None,
    ) -> WizardView:
        """
        Enter the wizard for a worker. Any draft left over from an earlier attempt is discarded.

        The service is resolved by `service_id` when given, otherwise by `service_key`.
        """
        if not worker_id or not worker_id.strip():
            raise StepValidationError("Worker not found", "Please select a worker again", ["worker_id"])

        service: ServiceItem | None = None
        if service_id:
            service = self._catalog.get_service_by_id(service_id)
            if service is None:
                raise CatalogLookupError(f"Unknown service id: {service_id}")
        elif service_key:
            service = self._catalog.get_service_by_key(service_key)
            if service is None:
                raise CatalogLookupError(f"Unknown service: {service_key}")

        price = self._default_base_price if base_price is None else base_price
        partial: dict[str, Any] = {
            "worker_id": worker_id.strip(),
            "worker_name": worker_name,
            "base_price": price,
            "final_price": price,
        }
        if service is not None:
            partial.update(
                service_id=service.id or service.key,
                service_name=service.title,
                estimated_duration=service.duration_minutes or self._default_duration,
            )

        self._store.reset(session_id)
        self._store.update(session_id, **partial)
        self._store.set_step(session_id, WizardStep.DATETIME)
        self._logger.info(
            "Booking wizard started",
            extra={
                "session_id": session_id,
                "worker_id": partial["worker_id"],
                "service": service.key if service else None,
            },
        )
        return self.view(session_id)

    def view(self, session_id: str) -> WizardView:
        return WizardView(
            draft=self._store.read(session_id),
            current_step=WizardStep(self._store.get_step(session_id)),
        )

    def continue_step(self, session_id: str, step: int, payload: dict[str, Any]) -> WizardView:
        target = _as_step(step)
        current = WizardStep(self._store.get_step(session_id))
        if target != current:
            raise StepOrderError(f"Cannot continue step {int(target)} while on step {int(current)}")
        if target is WizardStep.PAYMENT:
            raise StepOrderError("The payment step is completed by submitting the booking")

        draft = self._store.read(session_id)
        if target is WizardStep.DATETIME:
            partial = self._validate_datetime(payload)
        elif target is WizardStep.VEHICLE:
            partial = self._validate_vehicle(payload)
        elif target is WizardStep.SERVICES:
            partial = self._validate_services(payload, draft)
        else:
            partial = self._validate_location(payload)

        self._store.update(session_id, **partial)
        next_step = target.next
        self._store.set_step(session_id, next_step)
        self._logger.info(
            "Booking step completed",
            extra={"session_id": session_id, "step": int(target), "fields": sorted(partial)},
        )
        return self.view(session_id)

    def back(self, session_id: str) -> WizardView:
        current = WizardStep(self._store.get_step(session_id))
        self._store.set_step(session_id, current.previous)
        return self.view(session_id)

    def go_to(self, session_id: str, step: int) -> WizardView:
        """Jump back to an earlier step. Forward jumps would skip validation and are rejected."""
        target = _as_step(step)
        current = WizardStep(self._store.get_step(session_id))
        if target > current:
            raise StepOrderError(f"Cannot jump forward from step {int(current)} to step {int(target)}")
        self._store.set_step(session_id, target)
        return self.view(session_id)

    def cancel(self, session_id: str) -> WizardView:
        self._store.reset(session_id)
        self._logger.info("Booking wizard cancelled", extra={"session_id": session_id})
        return self.view(session_id)

    def priced_services(self, vehicle_type: VehicleType | None = None) -> list[ServiceItem]:
        if vehicle_type is None:
            return self._catalog.get_services()
        return self._catalog.get_services_with_vehicle_pricing(vehicle_type)

    def suggest_current_location(self, latitude: float, longitude: float) -> LocationSuggestion:
        """Street-level address for the device position, or the placeholder when it cannot be resolved."""
        coordinates = parse_coordinates((latitude, longitude))
        if coordinates is None:
            return LocationSuggestion(address=CURRENT_LOCATION_PLACEHOLDER, coordinates=None, resolved=False)
        if self._geocoder is None:
            return LocationSuggestion(address=CURRENT_LOCATION_PLACEHOLDER, coordinates=coordinates, resolved=False)
        try:
            address = self._geocoder.reverse(coordinates.latitude, coordinates.longitude)
        except Exception as e:
            self._logger.warning("Reverse geocoding failed", extra={"error": str(e)})
            address = None
        if not address:
            return LocationSuggestion(address=CURRENT_LOCATION_PLACEHOLDER, coordinates=coordinates, resolved=False)
        return LocationSuggestion(address=address, coordinates=coordinates, resolved=True)

    def _validate_datetime(self, payload: dict[str, Any]) -> dict[str, Any]:
        date_value = parse_iso_date(payload.get("date"))
        time_value = parse_hhmm(payload.get("time"))
        missing = [name for name, value in (("date", date_value), ("time", time_value)) if value is None]
        if missing:
            raise StepValidationError("Missing fields", "Please select date and time", missing)
        return {"date": date_value, "time": time_value}

    def _validate_vehicle(self, payload: dict[str, Any]) -> dict[str, Any]:
        vehicle_type = parse_vehicle_type(payload.get("vehicle_type"))
        if vehicle_type is None:
            raise StepValidationError("Missing fields", "Please select a vehicle type", ["vehicle_type"])

        year = payload.get("vehicle_year")
        if isinstance(year, str):
            year = year.strip()
            year = int(year) if year.isdigit() else (year or None)
        if year is not None and not is_valid_vehicle_year(year):
            raise StepValidationError("Invalid vehicle", "Please enter a valid vehicle year", ["vehicle_year"])

        return {
            "vehicle_type": vehicle_type,
            "vehicle_make": clean_optional_text(payload.get("vehicle_make")),
            "vehicle_model": clean_optional_text(payload.get("vehicle_model")),
            "vehicle_year": year,
            "vehicle_color": clean_optional_text(payload.get("vehicle_color")),
            "license_plate": clean_optional_text(payload.get("license_plate")),
        }

    def _validate_services(self, payload: dict[str, Any], draft: BookingDraft) -> dict[str, Any]:
        selected = unique_keys(payload.get("selected_services") or ())
        if not selected:
            raise StepValidationError(
                "No services selected", "Please select at least one service", ["selected_services"]
            )

        catalog = self._catalog.get_services_with_vehicle_pricing(draft.vehicle_type)
        unknown = unknown_service_keys(selected, catalog)
        if unknown:
            raise StepValidationError(
                "Unknown services",
                f"These services are not available: {', '.join(unknown)}",
                ["selected_services"],
            )

        # Prices are locked in here and not re-read at submission
        total = services_total(selected, catalog)
        return {"selected_services": selected, "services_total": total, "final_price": total}

    def _validate_location(self, payload: dict[str, Any]) -> dict[str, Any]:
        address = payload.get("address")
        address = address.strip() if isinstance(address, str) else ""
        if not address:
            raise StepValidationError("Missing location", "Please enter the service address", ["address"])

        partial: dict[str, Any] = {"address": address}
        if payload.get("coordinates") is not None:
            coordinates = parse_coordinates(payload["coordinates"])
            if coordinates is None:
                raise StepValidationError("Invalid location", "Coordinates are out of range", ["coordinates"])
            partial["coordinates"] = coordinates
        return partial


def _as_step(step: int) -> WizardStep:
    try:
        return WizardStep(int(step))
    except (TypeError, ValueError):
        raise StepOrderError(f"Unknown wizard step: {step}") from None
