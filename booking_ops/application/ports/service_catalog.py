from __future__ import annotations

from abc import ABC, abstractmethod

from booking_ops.domain.entities.service_catalog import ServiceCatalogEntry


class ServiceCatalogPort(ABC):
    @abstractmethod
    def get_service(self, service_code: str) -> ServiceCatalogEntry | None:
        """Get service catalog entry by service code."""
        raise NotImplementedError

    @abstractmethod
    def list_services(self) -> list[ServiceCatalogEntry]:
        raise NotImplementedError
