from __future__ import annotations

from abc import ABC, abstractmethod

from washbook.domain.entities.booking_draft import VehicleType
from washbook.domain.entities.service_catalog import ServiceItem


class ServiceCatalogPort(ABC):
    @abstractmethod
    def get_services(self) -> list[ServiceItem]:
        """Active services at their base price."""
        raise NotImplementedError

    @abstractmethod
    def get_services_with_vehicle_pricing(self, vehicle_type: VehicleType) -> list[ServiceItem]:
        """Active services priced for the given vehicle type."""
        raise NotImplementedError

    @abstractmethod
    def get_service_by_key(self, key: str) -> ServiceItem | None:
        raise NotImplementedError

    @abstractmethod
    def get_service_by_id(self, service_id: str) -> ServiceItem | None:
        """Lookup by the backend row id; catalogs without ids match on the key."""
        raise NotImplementedError
