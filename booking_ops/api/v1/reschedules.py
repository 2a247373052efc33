from fastapi import APIRouter, Depends

from booking_ops.api.errors import to_http_error
from booking_ops.api.v1.schemas import FileRescheduleSchema, RescheduleSchema, ResolveRescheduleSchema
from booking_ops.application.exceptions import BookingOpsError
from booking_ops.application.use_cases.reschedule import RescheduleRequestUseCase
from booking_ops.wiring.dependencies import get_reschedule_use_case

router = APIRouter()


@router.post("/reschedules", response_model=RescheduleSchema, status_code=201)
def file_reschedule(
    req: FileRescheduleSchema,
    uc: RescheduleRequestUseCase = Depends(get_reschedule_use_case),
):
    try:
        request = uc.file_request(
            req.appointment_id, req.customer_id, req.requested_date, req.requested_time, req.reason
        )
    except BookingOpsError as e:
        raise to_http_error(e)
    return RescheduleSchema.from_entity(request)


@router.post("/reschedules/{request_id}/resolve", response_model=RescheduleSchema)
def resolve_reschedule(
    request_id: str,
    req: ResolveRescheduleSchema,
    uc: RescheduleRequestUseCase = Depends(get_reschedule_use_case),
):
    try:
        request = uc.resolve(request_id, approve=req.approve, staff_id=req.staff_id, note=req.note)
    except BookingOpsError as e:
        raise to_http_error(e)
    return RescheduleSchema.from_entity(request)


@router.get("/reschedules", response_model=list[RescheduleSchema])
def reschedule_history(
    appointment_id: str,
    uc: RescheduleRequestUseCase = Depends(get_reschedule_use_case),
):
    return [RescheduleSchema.from_entity(r) for r in uc.history(appointment_id)]
