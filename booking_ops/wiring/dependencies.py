from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from booking_ops.core.config import settings
from booking_ops.application.ports.booking_store import BookingStorePort
from booking_ops.application.ports.cancellation_store import CancellationStorePort
from booking_ops.application.ports.notifier import NotifierPort
from booking_ops.application.ports.payment_gateway import PaymentGatewayPort
from booking_ops.application.ports.reschedule_store import RescheduleStorePort
from booking_ops.application.ports.service_catalog import ServiceCatalogPort
from booking_ops.application.use_cases.booking_workflow import BookingWorkflowCoordinator
from booking_ops.application.use_cases.cancellation import CancellationRequestUseCase
from booking_ops.application.use_cases.reschedule import RescheduleRequestUseCase
from booking_ops.application.use_cases.schedule import ScheduleUseCase
from booking_ops.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from booking_ops.infrastructure.notifications.log_notifier import LogNotifier
from booking_ops.infrastructure.payments.http_gateway import HttpPaymentGateway
from booking_ops.infrastructure.payments.mock_gateway import MockPaymentGateway
from booking_ops.infrastructure.store.memory_store import (
    MemoryBookingStore,
    MemoryCancellationStore,
    MemoryRescheduleStore,
)


@lru_cache
def get_booking_store() -> BookingStorePort:
    return MemoryBookingStore()


@lru_cache
def get_cancellation_store() -> CancellationStorePort:
    return MemoryCancellationStore()


@lru_cache
def get_reschedule_store() -> RescheduleStorePort:
    return MemoryRescheduleStore()


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    return ServiceCatalogStore()


@lru_cache
def get_notifier() -> NotifierPort:
    return LogNotifier()


@lru_cache
def get_payment_gateway() -> PaymentGatewayPort:
    logger = logging.getLogger(__name__)
    if not settings.PAYMENT_API_KEY:
        if settings.ENV.lower() in {"dev", "local", "test"}:
            logger.info("Using MockPaymentGateway (PAYMENT_API_KEY missing, ENV=%s)", settings.ENV)
            return MockPaymentGateway()
        raise ValueError("PAYMENT_API_KEY is required to take payments.")
    return HttpPaymentGateway()


def get_timezone() -> ZoneInfo:
    try:
        return ZoneInfo(settings.BUSINESS_TIMEZONE)
    except Exception:
        logging.getLogger(__name__).warning(
            "Unknown BUSINESS_TIMEZONE, falling back to UTC", extra={"timezone": settings.BUSINESS_TIMEZONE}
        )
        return ZoneInfo("UTC")


@lru_cache
def get_booking_workflow() -> BookingWorkflowCoordinator:
    return BookingWorkflowCoordinator(
        store=get_booking_store(),
        catalog=get_service_catalog(),
        payments=get_payment_gateway(),
        notifier=get_notifier(),
        default_return_url=settings.PAYMENT_RETURN_URL,
    )


@lru_cache
def get_cancellation_use_case() -> CancellationRequestUseCase:
    return CancellationRequestUseCase(
        requests=get_cancellation_store(),
        bookings=get_booking_store(),
        workflow=get_booking_workflow(),
        notifier=get_notifier(),
    )


@lru_cache
def get_reschedule_use_case() -> RescheduleRequestUseCase:
    return RescheduleRequestUseCase(
        requests=get_reschedule_store(),
        bookings=get_booking_store(),
        workflow=get_booking_workflow(),
        notifier=get_notifier(),
        slot_start=settings.SLOT_START,
        slot_end=settings.SLOT_END,
        slot_minutes=settings.SLOT_MINUTES,
    )


def get_schedule_use_case() -> ScheduleUseCase:
    return ScheduleUseCase(
        store=get_booking_store(),
        timezone=get_timezone(),
        slot_start=settings.SLOT_START,
        slot_end=settings.SLOT_END,
        slot_minutes=settings.SLOT_MINUTES,
    )
