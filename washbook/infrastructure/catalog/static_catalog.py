from __future__ import annotations

from dataclasses import replace

from washbook.application.ports.service_catalog import ServiceCatalogPort
from washbook.application.utils.pricing import calculate_service_price
from washbook.domain.entities.booking_draft import VehicleType
from washbook.domain.entities.service_catalog import ServiceItem
from washbook.infrastructure.catalog.service_catalog_data import SERVICE_CATALOG


class StaticServiceCatalog(ServiceCatalogPort):
    def __init__(self, services: list[ServiceItem] | None = None) -> None:
        self._services = list(SERVICE_CATALOG if services is None else services)

    def get_services(self) -> list[ServiceItem]:
        return [s for s in self._services if s.is_active]

    def get_services_with_vehicle_pricing(self, vehicle_type: VehicleType) -> list[ServiceItem]:
        return [replace(s, price=calculate_service_price(s, vehicle_type)) for s in self.get_services()]

    def get_service_by_key(self, key: str) -> ServiceItem | None:
        normalized_key = key.lower().strip()
        for service in self.get_services():
            if service.key == normalized_key:
                return service
        return None

    def get_service_by_id(self, service_id: str) -> ServiceItem | None:
        for service in self.get_services():
            if (service.id or service.key) == service_id:
                return service
        return None
