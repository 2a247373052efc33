from __future__ import annotations

from abc import ABC, abstractmethod

from booking_ops.domain.entities.appointment import CancellationRequest


class CancellationStorePort(ABC):
    @abstractmethod
    def load(self, request_id: str) -> CancellationRequest:
        """Return the stored request. Raises NotFound if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def save(self, request: CancellationRequest) -> None:
        raise NotImplementedError

    @abstractmethod
    def for_appointment(self, appointment_id: str) -> list[CancellationRequest]:
        raise NotImplementedError
