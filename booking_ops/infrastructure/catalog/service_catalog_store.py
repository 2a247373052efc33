from __future__ import annotations

from decimal import Decimal

from booking_ops.application.ports.service_catalog import ServiceCatalogPort
from booking_ops.domain.entities.service_catalog import ServiceCatalogEntry

SERVICE_CATALOG: dict[str, ServiceCatalogEntry] = {
    entry.code: entry
    for entry in (
        ServiceCatalogEntry("move_out_cleaning", "Move-Out Cleaning", Decimal("350.00"), 240),
        ServiceCatalogEntry("move_in_cleaning", "Move-In Cleaning", Decimal("320.00"), 240),
        ServiceCatalogEntry("deep_cleaning", "Deep Cleaning", Decimal("280.00"), 180),
        ServiceCatalogEntry("appliance_cleaning", "Appliance Cleaning", Decimal("120.00"), 90),
        ServiceCatalogEntry("carpet_cleaning", "Carpet Cleaning", Decimal("150.00"), 120),
        ServiceCatalogEntry("window_cleaning", "Window Cleaning", Decimal("110.00"), 90),
        ServiceCatalogEntry("post_construction_cleaning", "Post-Construction Cleaning", Decimal("450.00"), 360),
        ServiceCatalogEntry("on_site_estimate", "On-Site Estimate", Decimal("0.00"), 30),
    )
}


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(self, catalog: dict[str, ServiceCatalogEntry] | None = None) -> None:
        self._catalog = catalog if catalog is not None else SERVICE_CATALOG

    def get_service(self, service_code: str) -> ServiceCatalogEntry | None:
        normalized_code = service_code.lower().strip()
        return self._catalog.get(normalized_code)

    def list_services(self) -> list[ServiceCatalogEntry]:
        return sorted(self._catalog.values(), key=lambda e: e.display_name)
