from __future__ import annotations

from abc import ABC, abstractmethod

from booking_ops.domain.entities.booking import Booking, BookingQuery


class BookingStorePort(ABC):
    @abstractmethod
    def load(self, booking_id: str) -> Booking:
        """Return the stored booking. Raises NotFound if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def save(self, booking: Booking, expected_version: int | None) -> bool:
        """
        Persist a booking with an optimistic version check.

        `expected_version=None` inserts a new booking. Otherwise the write only
        happens if the stored version still equals `expected_version`; returns
        False on a mismatch (or an insert over an existing id) so the caller can
        surface a conflict.
        """
        raise NotImplementedError

    @abstractmethod
    def query(self, criteria: BookingQuery) -> list[Booking]:
        raise NotImplementedError
