from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import pytest

from booking_ops.application.use_cases.booking_workflow import BookingWorkflowCoordinator
from booking_ops.domain.entities.booking import BookingDraft
from booking_ops.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from booking_ops.infrastructure.notifications.log_notifier import LogNotifier
from booking_ops.infrastructure.payments.mock_gateway import MockPaymentGateway
from booking_ops.infrastructure.store.memory_store import MemoryBookingStore


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 4, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store() -> MemoryBookingStore:
    return MemoryBookingStore()


@pytest.fixture
def notifier() -> LogNotifier:
    return LogNotifier()


@pytest.fixture
def payments() -> MockPaymentGateway:
    return MockPaymentGateway()


@pytest.fixture
def workflow(store, notifier, payments, clock) -> BookingWorkflowCoordinator:
    return BookingWorkflowCoordinator(
        store=store,
        catalog=ServiceCatalogStore(),
        payments=payments,
        notifier=notifier,
        default_return_url="http://localhost:3000/dashboard/payments",
        clock=clock,
    )


def make_draft(**overrides) -> BookingDraft:
    fields = dict(
        customer_id="cust_1",
        service_code="move_out_cleaning",
        branch_id="toronto-downtown",
        scheduled_date=date(2025, 4, 15),
        scheduled_time=time(9, 0),
        address="12 King St W, Toronto",
        customer_name="Jane Cooper",
    )
    fields.update(overrides)
    return BookingDraft(**fields)
