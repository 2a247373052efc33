from fastapi import APIRouter, Depends

from booking_ops.api.errors import to_http_error
from booking_ops.api.v1.schemas import CancellationSchema, FileCancellationSchema, ResolveCancellationSchema
from booking_ops.application.exceptions import BookingOpsError
from booking_ops.application.use_cases.cancellation import CancellationRequestUseCase
from booking_ops.wiring.dependencies import get_cancellation_use_case

router = APIRouter()


@router.post("/cancellations", response_model=CancellationSchema, status_code=201)
def file_cancellation(
    req: FileCancellationSchema,
    uc: CancellationRequestUseCase = Depends(get_cancellation_use_case),
):
    try:
        request = uc.file_request(req.appointment_id, req.customer_id, req.reason)
    except BookingOpsError as e:
        raise to_http_error(e)
    return CancellationSchema.from_entity(request)


@router.post("/cancellations/{request_id}/resolve", response_model=CancellationSchema)
def resolve_cancellation(
    request_id: str,
    req: ResolveCancellationSchema,
    uc: CancellationRequestUseCase = Depends(get_cancellation_use_case),
):
    try:
        request = uc.resolve(request_id, approve=req.approve, staff_id=req.staff_id, note=req.note)
    except BookingOpsError as e:
        raise to_http_error(e)
    return CancellationSchema.from_entity(request)
