from fastapi import HTTPException

from booking_ops.application.exceptions import (
    BookingOpsError,
    Conflict,
    NotFound,
    ValidationError,
    WorkflowError,
)


def to_http_error(error: BookingOpsError) -> HTTPException:
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, NotFound):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, Conflict):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, WorkflowError):
        return HTTPException(status_code=422, detail={"reason": error.reason.value, "message": str(error)})
    return HTTPException(status_code=500, detail=str(error))
