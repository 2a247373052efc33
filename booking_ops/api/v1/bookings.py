from fastapi import APIRouter, Depends

from booking_ops.api.errors import to_http_error
from booking_ops.api.v1.schemas import (
    AssignStaffSchema,
    BookingPageSchema,
    BookingSchema,
    CreateBookingSchema,
    PaymentSessionRequestSchema,
    PaymentSessionSchema,
    PendingTransitionSchema,
    SubmissionSchema,
    TransitionRequestSchema,
    TransitionResponseSchema,
)
from booking_ops.application.exceptions import BookingOpsError
from booking_ops.application.use_cases.booking_workflow import BookingListQuery, BookingWorkflowCoordinator
from booking_ops.application.utils.calendar_grid import parse_hhmm, parse_iso_date
from booking_ops.core.config import settings
from booking_ops.domain.entities.booking import BookingDraft
from booking_ops.wiring.dependencies import get_booking_workflow

router = APIRouter()


@router.post("/bookings", response_model=SubmissionSchema, status_code=201)
def submit_booking(
    req: CreateBookingSchema,
    uc: BookingWorkflowCoordinator = Depends(get_booking_workflow),
):
    try:
        draft = BookingDraft(
            customer_id=req.customer_id,
            service_code=req.service_code,
            branch_id=req.branch_id,
            scheduled_date=parse_iso_date(req.scheduled_date),
            scheduled_time=parse_hhmm(req.scheduled_time) if req.scheduled_time else None,
            address=req.address,
            duration_minutes=req.duration_minutes,
            amount=req.amount,
            notes=req.notes,
            customer_name=req.customer_name,
        )
        result = uc.submit_booking(draft)
    except BookingOpsError as e:
        raise to_http_error(e)

    return SubmissionSchema(
        booking_id=result.booking_id,
        amount=result.amount,
        requires_payment=result.requires_payment,
    )


@router.get("/bookings", response_model=BookingPageSchema)
def list_bookings(
    search: str | None = None,
    status: str = "all",
    branch: str = "all",
    sort_key: str = "scheduled_date",
    sort_dir: str = "desc",
    page: int = 1,
    page_size: int | None = None,
    uc: BookingWorkflowCoordinator = Depends(get_booking_workflow),
):
    try:
        result = uc.list_bookings(
            BookingListQuery(
                search=search,
                status=status,
                branch=branch,
                sort_key=sort_key,
                sort_dir=sort_dir,
                page=page,
                page_size=page_size or settings.DEFAULT_PAGE_SIZE,
            )
        )
    except BookingOpsError as e:
        raise to_http_error(e)

    return BookingPageSchema(
        items=[BookingSchema.from_entity(b) for b in result.items],
        total_count=result.total_count,
        total_pages=result.total_pages,
        page=result.page,
        page_size=result.page_size,
    )


@router.get("/bookings/{booking_id}", response_model=BookingSchema)
def get_booking(booking_id: str, uc: BookingWorkflowCoordinator = Depends(get_booking_workflow)):
    try:
        return BookingSchema.from_entity(uc.get_booking(booking_id))
    except BookingOpsError as e:
        raise to_http_error(e)


@router.post("/bookings/{booking_id}/payment-session", response_model=PaymentSessionSchema)
def create_payment_session(
    booking_id: str,
    req: PaymentSessionRequestSchema,
    uc: BookingWorkflowCoordinator = Depends(get_booking_workflow),
):
    try:
        session = uc.create_payment_session(booking_id, return_url=req.return_url)
    except BookingOpsError as e:
        raise to_http_error(e)
    return PaymentSessionSchema(session_id=session.session_id, session_url=session.session_url)


@router.post("/bookings/{booking_id}/transitions", response_model=TransitionResponseSchema)
def change_status(
    booking_id: str,
    req: TransitionRequestSchema,
    uc: BookingWorkflowCoordinator = Depends(get_booking_workflow),
):
    try:
        pending = uc.request_transition(
            booking_id, req.status, actor_id=req.actor_id, expected_version=req.expected_version
        )
        booking = uc.commit_transition(pending) if req.commit else None
    except BookingOpsError as e:
        raise to_http_error(e)

    return TransitionResponseSchema(
        pending=PendingTransitionSchema.from_entity(pending),
        booking=BookingSchema.from_entity(booking) if booking else None,
    )


@router.post("/bookings/{booking_id}/staff", response_model=BookingSchema)
def assign_staff(
    booking_id: str,
    req: AssignStaffSchema,
    uc: BookingWorkflowCoordinator = Depends(get_booking_workflow),
):
    try:
        return BookingSchema.from_entity(uc.assign_staff(booking_id, req.staff_ids))
    except BookingOpsError as e:
        raise to_http_error(e)
