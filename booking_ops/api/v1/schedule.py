from fastapi import APIRouter, Depends

from booking_ops.api.errors import to_http_error
from booking_ops.api.v1.schemas import AppointmentSchema, CalendarCellSchema
from booking_ops.application.exceptions import BookingOpsError
from booking_ops.application.use_cases.schedule import ScheduleUseCase
from booking_ops.application.utils.appointment_aggregator import AppointmentFilter
from booking_ops.wiring.dependencies import get_schedule_use_case

router = APIRouter()


@router.get("/schedule", response_model=list[CalendarCellSchema])
def calendar_view(
    date: str,
    view: str = "week",
    search: str | None = None,
    status: str = "all",
    branch: str = "all",
    offset: int = 0,
    uc: ScheduleUseCase = Depends(get_schedule_use_case),
):
    try:
        cells = uc.calendar_view(
            date, view, AppointmentFilter(search=search, status=status, branch=branch), offset=offset
        )
    except BookingOpsError as e:
        raise to_http_error(e)
    return [CalendarCellSchema.from_entity(c) for c in cells]


@router.get("/schedule/slots", response_model=dict[str, list[AppointmentSchema]])
def day_slots(
    date: str,
    search: str | None = None,
    status: str = "all",
    branch: str = "all",
    uc: ScheduleUseCase = Depends(get_schedule_use_case),
):
    try:
        slots = uc.day_slots(date, AppointmentFilter(search=search, status=status, branch=branch))
    except BookingOpsError as e:
        raise to_http_error(e)
    return {label: [AppointmentSchema.from_entity(a) for a in items] for label, items in slots.items()}
