from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any

from washbook.application.exceptions import BackendError
from washbook.application.ports.service_catalog import ServiceCatalogPort
from washbook.application.utils.pricing import calculate_service_price
from washbook.domain.entities.booking_draft import VehicleType
from washbook.domain.entities.service_catalog import ServiceItem
from washbook.infrastructure.supabase.rest_client import SupabaseRestClient


def service_from_row(row: dict[str, Any]) -> ServiceItem:
    return ServiceItem(
        id=str(row["id"]) if row.get("id") is not None else None,
        key=row["key"],
        title=row.get("title") or row["key"],
        description=row.get("description") or "",
        price=row.get("base_price") or 0,
        icon=row.get("icon_name") or "Wrench",
        category=row.get("category") or "basic",
        duration_minutes=row.get("duration_minutes") or 60,
        is_active=bool(row.get("is_active", True)),
        notes=row.get("notes"),
        sedan_multiplier=row.get("sedan_multiplier") or 1.00,
        suv_multiplier=row.get("suv_multiplier") or 1.20,
        van_multiplier=row.get("van_multiplier") or 1.40,
        truck_multiplier=row.get("truck_multiplier") or 1.60,
    )


class SupabaseServiceCatalog(ServiceCatalogPort):
    """
    Reads the `services` table.

    Active services are cached in-process for `cache_ttl_seconds`. When the
    backend fails, a stale cache is served instead; without one the error
    propagates.
    """

    def __init__(self, client: SupabaseRestClient, cache_ttl_seconds: float = 6 * 60 * 60) -> None:
        self._client = client
        self._cache_ttl_seconds = cache_ttl_seconds
        self._cached: list[ServiceItem] | None = None
        self._cached_at: float | None = None
        self._logger = logging.getLogger(__name__)

    def get_services(self) -> list[ServiceItem]:
        now = time.monotonic()
        if self._cached is not None and self._cached_at is not None:
            if now - self._cached_at < self._cache_ttl_seconds:
                return list(self._cached)

        try:
            rows = self._client.select(
                "services",
                {"select": "*", "is_active": "eq.true", "order": "category.asc,base_price.asc"},
            )
        except BackendError as e:
            if self._cached is not None:
                self._logger.warning("Returning cached services as fallback", extra={"error": e.message})
                return list(self._cached)
            raise

        self._cached = [service_from_row(row) for row in rows]
        self._cached_at = now
        return list(self._cached)

    def get_services_with_vehicle_pricing(self, vehicle_type: VehicleType) -> list[ServiceItem]:
        return [replace(s, price=calculate_service_price(s, vehicle_type)) for s in self.get_services()]

    def get_service_by_key(self, key: str) -> ServiceItem | None:
        normalized_key = key.lower().strip()
        for service in self.get_services():
            if service.key == normalized_key:
                return service
        return None

    def get_service_by_id(self, service_id: str) -> ServiceItem | None:
        rows = self._client.select("services", {"select": "*", "id": f"eq.{service_id}"})
        return service_from_row(rows[0]) if rows else None
