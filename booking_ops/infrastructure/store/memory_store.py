from __future__ import annotations

import threading

from booking_ops.application.exceptions import NotFound
from booking_ops.application.ports.booking_store import BookingStorePort
from booking_ops.application.ports.cancellation_store import CancellationStorePort
from booking_ops.application.ports.reschedule_store import RescheduleStorePort
from booking_ops.domain.entities.appointment import CancellationRequest, RescheduleRequest
from booking_ops.domain.entities.booking import Booking, BookingQuery


class MemoryBookingStore(BookingStorePort):
    def __init__(self, bookings: list[Booking] | None = None) -> None:
        self._bookings: dict[str, Booking] = {b.id: b for b in bookings or []}
        self._order: list[str] = [b.id for b in bookings or []]
        self._lock = threading.Lock()

    def load(self, booking_id: str) -> Booking:
        with self._lock:
            booking = self._bookings.get(booking_id)
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found")
        return booking

    def save(self, booking: Booking, expected_version: int | None) -> bool:
        with self._lock:
            stored = self._bookings.get(booking.id)
            if expected_version is None:
                if stored is not None:
                    return False
                self._order.append(booking.id)
            elif stored is None or stored.version != expected_version:
                return False
            self._bookings[booking.id] = booking
            return True

    def query(self, criteria: BookingQuery) -> list[Booking]:
        with self._lock:
            bookings = [self._bookings[booking_id] for booking_id in self._order]
        return [b for b in bookings if criteria.matches(b)]


class MemoryCancellationStore(CancellationStorePort):
    def __init__(self) -> None:
        self._requests: dict[str, CancellationRequest] = {}
        self._lock = threading.Lock()

    def load(self, request_id: str) -> CancellationRequest:
        with self._lock:
            request = self._requests.get(request_id)
        if request is None:
            raise NotFound(f"Cancellation request {request_id} not found")
        return request

    def save(self, request: CancellationRequest) -> None:
        with self._lock:
            self._requests[request.id] = request

    def for_appointment(self, appointment_id: str) -> list[CancellationRequest]:
        with self._lock:
            requests = list(self._requests.values())
        return sorted(
            (r for r in requests if r.appointment_id == appointment_id),
            key=lambda r: r.created_at,
        )


class MemoryRescheduleStore(RescheduleStorePort):
    def __init__(self) -> None:
        self._requests: dict[str, RescheduleRequest] = {}
        self._lock = threading.Lock()

    def load(self, request_id: str) -> RescheduleRequest:
        with self._lock:
            request = self._requests.get(request_id)
        if request is None:
            raise NotFound(f"Reschedule request {request_id} not found")
        return request

    def save(self, request: RescheduleRequest) -> None:
        with self._lock:
            self._requests[request.id] = request

    def for_appointment(self, appointment_id: str) -> list[RescheduleRequest]:
        with self._lock:
            requests = [r for r in self._requests.values() if r.appointment_id == appointment_id]
        return sorted(requests, key=lambda r: r.created_at)
