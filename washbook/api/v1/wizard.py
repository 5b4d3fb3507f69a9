import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from washbook.api.v1.schemas import (
    LocationSuggestionSchema,
    LocationSuggestRequestSchema,
    ServiceItemSchema,
    StartRequestSchema,
    StepRequestSchema,
    SubmissionResponseSchema,
    SubmitRequestSchema,
    WizardViewSchema,
)
from washbook.application.exceptions import (
    AuthenticationRequiredError,
    BackendError,
    CatalogLookupError,
    StepOrderError,
    StepValidationError,
    SubmissionInProgressError,
)
from washbook.application.use_cases.submit_booking import SubmitBookingUseCase
from washbook.application.use_cases.wizard import BookingWizardUseCase
from washbook.application.utils.field_rules import parse_vehicle_type
from washbook.wiring.dependencies import get_submit_booking_use_case, get_wizard_use_case

router = APIRouter()
logger = logging.getLogger(__name__)


def _validation_detail(e: StepValidationError) -> dict:
    return {"title": e.title, "message": e.message, "fields": e.fields}


@router.get("/services", response_model=list[ServiceItemSchema])
def list_services(
    vehicle_type: str | None = Query(None),
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    parsed = None
    if vehicle_type:
        parsed = parse_vehicle_type(vehicle_type)
        if parsed is None:
            raise HTTPException(status_code=400, detail=f"Unknown vehicle type: {vehicle_type}")
    try:
        items = uc.priced_services(parsed)
    except BackendError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return [ServiceItemSchema.from_item(item) for item in items]


@router.post("/location/suggest", response_model=LocationSuggestionSchema)
def suggest_location(
    req: LocationSuggestRequestSchema,
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    return LocationSuggestionSchema.from_suggestion(uc.suggest_current_location(req.latitude, req.longitude))


@router.post("/{session_id}/start", response_model=WizardViewSchema)
def start(
    session_id: str,
    req: StartRequestSchema,
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    try:
        view = uc.start(
            session_id,
            worker_id=req.worker_id,
            worker_name=req.worker_name,
            base_price=req.base_price,
            service_key=req.service_key,
            service_id=req.service_id,
        )
    except StepValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))
    except CatalogLookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return WizardViewSchema.from_view(view)


@router.get("/{session_id}", response_model=WizardViewSchema)
def get_wizard(session_id: str, uc: BookingWizardUseCase = Depends(get_wizard_use_case)):
    return WizardViewSchema.from_view(uc.view(session_id))


@router.post("/{session_id}/steps/{step}", response_model=WizardViewSchema)
def continue_step(
    session_id: str,
    step: int,
    req: StepRequestSchema,
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    try:
        view = uc.continue_step(session_id, step, req.model_dump(exclude_unset=True))
    except StepValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))
    except StepOrderError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return WizardViewSchema.from_view(view)


@router.post("/{session_id}/back", response_model=WizardViewSchema)
def back(session_id: str, uc: BookingWizardUseCase = Depends(get_wizard_use_case)):
    return WizardViewSchema.from_view(uc.back(session_id))


@router.post("/{session_id}/cancel", response_model=WizardViewSchema)
def cancel(session_id: str, uc: BookingWizardUseCase = Depends(get_wizard_use_case)):
    return WizardViewSchema.from_view(uc.cancel(session_id))


@router.post("/{session_id}/submit", response_model=SubmissionResponseSchema)
def submit(
    session_id: str,
    req: SubmitRequestSchema,
    customer_id: str | None = Header(None, alias="X-Customer-Id"),
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
    uc: SubmitBookingUseCase = Depends(get_submit_booking_use_case),
):
    try:
        result = uc.submit(
            session_id,
            customer_id=customer_id,
            payment_method=req.payment_method,
            idempotency_key=idempotency_key,
        )
    except StepValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except (StepOrderError, SubmissionInProgressError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=502, detail=e.message)

    logger.info(
        "Booking submitted",
        extra={"session_id": session_id, "booking_id": result.booking.id, "payment_status": result.payment_status},
    )
    return SubmissionResponseSchema.from_result(result)
