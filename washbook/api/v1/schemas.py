from dataclasses import asdict
from typing import Any

from pydantic import BaseModel, Field

from washbook.application.use_cases.wizard import LocationSuggestion, WizardView
from washbook.domain.entities.booking import SubmissionResult
from washbook.domain.entities.service_catalog import ServiceItem
from washbook.domain.entities.wizard_step import CONFIRMATION_ROUTE


class CoordinatesSchema(BaseModel):
    latitude: float
    longitude: float


class StartRequestSchema(BaseModel):
    worker_id: str
    worker_name: str = ""
    base_price: float | None = None
    service_key: str | None = None
    service_id: str | None = None


class StepRequestSchema(BaseModel):
    # DateTime
    date: str | None = None
    time: str | None = None
    # Vehicle
    vehicle_type: str | None = None
    vehicle_make: str | None = None
    vehicle_model: str | None = None
    vehicle_year: int | str | None = None
    vehicle_color: str | None = None
    license_plate: str | None = None
    # Services
    selected_services: list[str] | None = None
    # Location
    address: str | None = None
    coordinates: CoordinatesSchema | None = None


class SubmitRequestSchema(BaseModel):
    payment_method: str = "cash"


class DraftSchema(BaseModel):
    worker_id: str
    worker_name: str
    base_price: float
    service_id: str
    service_name: str
    estimated_duration: int
    date: str
    time: str
    vehicle_type: str
    vehicle_make: str | None = None
    vehicle_model: str | None = None
    vehicle_year: int | None = None
    vehicle_color: str | None = None
    license_plate: str | None = None
    selected_services: list[str] = Field(default_factory=list)
    services_total: float
    address: str
    coordinates: CoordinatesSchema | None = None
    payment_method: str
    notes: str
    final_price: float


class WizardViewSchema(BaseModel):
    current_step: int
    route: str
    total_steps: int
    draft: DraftSchema

    @classmethod
    def from_view(cls, view: WizardView) -> "WizardViewSchema":
        data: dict[str, Any] = asdict(view.draft)
        data["vehicle_type"] = view.draft.vehicle_type.value
        data["payment_method"] = view.draft.payment_method.value
        data["selected_services"] = list(view.draft.selected_services)
        return cls(
            current_step=int(view.current_step),
            route=view.route,
            total_steps=view.total_steps,
            draft=DraftSchema.model_validate(data),
        )


class ServiceItemSchema(BaseModel):
    key: str
    title: str
    description: str
    price: int
    category: str
    duration_minutes: int
    icon: str

    @classmethod
    def from_item(cls, item: ServiceItem) -> "ServiceItemSchema":
        return cls(
            key=item.key,
            title=item.title,
            description=item.description,
            price=item.price,
            category=item.category,
            duration_minutes=item.duration_minutes,
            icon=item.icon,
        )


class LocationSuggestRequestSchema(BaseModel):
    latitude: float
    longitude: float


class LocationSuggestionSchema(BaseModel):
    address: str
    coordinates: CoordinatesSchema | None = None
    resolved: bool

    @classmethod
    def from_suggestion(cls, suggestion: LocationSuggestion) -> "LocationSuggestionSchema":
        coordinates = asdict(suggestion.coordinates) if suggestion.coordinates else None
        return cls(address=suggestion.address, coordinates=coordinates, resolved=suggestion.resolved)


class SubmissionResponseSchema(BaseModel):
    confirmation_id: str
    booking_id: str
    booking_number: str | None = None
    payment_status: str
    idempotency_key: str
    route: str = CONFIRMATION_ROUTE

    @classmethod
    def from_result(cls, result: SubmissionResult) -> "SubmissionResponseSchema":
        return cls(
            confirmation_id=result.confirmation_id,
            booking_id=result.booking.id,
            booking_number=result.booking.booking_number,
            payment_status=result.payment_status,
            idempotency_key=result.idempotency_key,
        )
