from __future__ import annotations

from abc import ABC, abstractmethod

from booking_ops.domain.entities.appointment import RescheduleRequest


class RescheduleStorePort(ABC):
    @abstractmethod
    def load(self, request_id: str) -> RescheduleRequest:
        """Return the stored request. Raises NotFound if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def save(self, request: RescheduleRequest) -> None:
        raise NotImplementedError

    @abstractmethod
    def for_appointment(self, appointment_id: str) -> list[RescheduleRequest]:
        """Requests filed against one appointment, oldest first."""
        raise NotImplementedError
