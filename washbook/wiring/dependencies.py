from functools import lru_cache
import logging

from washbook.core.config import settings
from washbook.application.ports.booking_backend import BookingBackendPort
from washbook.application.ports.geocoder import GeocoderPort
from washbook.application.ports.service_catalog import ServiceCatalogPort
from washbook.application.use_cases.submit_booking import SubmitBookingUseCase
from washbook.application.use_cases.wizard import BookingWizardUseCase
from washbook.infrastructure.backend.mock_backend import MockBookingBackend
from washbook.infrastructure.catalog.static_catalog import StaticServiceCatalog
from washbook.infrastructure.geocoding.mock_geocoder import MockGeocoder
from washbook.infrastructure.geocoding.nominatim_client import NominatimGeocoder
from washbook.infrastructure.store.memory_store import MemoryDraftStore
from washbook.infrastructure.supabase.bookings import SupabaseBookingBackend
from washbook.infrastructure.supabase.rest_client import SupabaseRestClient
from washbook.infrastructure.supabase.services import SupabaseServiceCatalog


def _use_mocks() -> bool:
    return not settings.SUPABASE_URL or settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_draft_store() -> MemoryDraftStore:
    return MemoryDraftStore(session_ttl_seconds=settings.DRAFT_TTL_SECONDS)


@lru_cache
def get_supabase_client() -> SupabaseRestClient:
    return SupabaseRestClient(
        url=settings.SUPABASE_URL or "",
        api_key=settings.SUPABASE_ANON_KEY or "",
        access_token=settings.SUPABASE_ACCESS_TOKEN,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    if _use_mocks():
        return StaticServiceCatalog()
    return SupabaseServiceCatalog(get_supabase_client(), cache_ttl_seconds=settings.SERVICES_CACHE_TTL_SECONDS)


@lru_cache
def get_booking_backend() -> BookingBackendPort:
    logger = logging.getLogger(__name__)
    if _use_mocks():
        logger.info("Using MockBookingBackend (ENV=%s)", settings.ENV)
        return MockBookingBackend()
    logger.info("Using SupabaseBookingBackend")
    return SupabaseBookingBackend(
        get_supabase_client(),
        platform_fee_percentage=settings.PLATFORM_FEE_PERCENTAGE,
        currency=settings.CURRENCY,
    )


@lru_cache
def get_geocoder() -> GeocoderPort:
    if settings.ENV.lower() in {"dev", "local"}:
        return MockGeocoder()
    return NominatimGeocoder(
        base_url=settings.NOMINATIM_BASE_URL,
        user_agent=settings.GEOCODER_USER_AGENT,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


@lru_cache
def get_wizard_use_case() -> BookingWizardUseCase:
    return BookingWizardUseCase(
        store=get_draft_store(),
        catalog=get_service_catalog(),
        geocoder=get_geocoder(),
        default_base_price=settings.DEFAULT_BASE_PRICE,
        default_duration=settings.DEFAULT_ESTIMATED_DURATION,
    )


@lru_cache
def get_submit_booking_use_case() -> SubmitBookingUseCase:
    return SubmitBookingUseCase(
        store=get_draft_store(),
        backend=get_booking_backend(),
        platform_fee_percentage=settings.PLATFORM_FEE_PERCENTAGE,
        default_duration=settings.DEFAULT_ESTIMATED_DURATION,
        result_ttl_seconds=settings.IDEMPOTENCY_TTL_SECONDS,
    )
