from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ServiceCatalogEntry:
    code: str
    display_name: str
    base_price: Decimal
    duration_minutes: int
    notes: str | None = None
