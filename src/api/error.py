"""API error responses

Use case errors are raised as ClientError and rendered as
{"error": {"code", "message", "reason", "details"}}.
"""

from typing import Optional
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from src.domain.errors import (
    ConcurrentUpdateError,
    ConflictError,
    DuplicateInvoiceNumberError,
    DuplicatePaymentReferenceError,
    DuplicateReceiptError,
    InvalidStatusTransitionError,
    OverpaymentError,
    StorageError,
    ValidationError,
)
from src.libs.result import Error

_STATUS_BY_CODE = {
    ValidationError.code: status.HTTP_400_BAD_REQUEST,
    InvalidStatusTransitionError.code: status.HTTP_400_BAD_REQUEST,
    OverpaymentError.code: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConflictError.code: status.HTTP_409_CONFLICT,
    DuplicateInvoiceNumberError.code: status.HTTP_409_CONFLICT,
    DuplicatePaymentReferenceError.code: status.HTTP_409_CONFLICT,
    DuplicateReceiptError.code: status.HTTP_409_CONFLICT,
    ConcurrentUpdateError.code: status.HTTP_409_CONFLICT,
    StorageError.code: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(error: Error) -> int:
    if error.code.endswith("NOT_FOUND"):
        return status.HTTP_404_NOT_FOUND
    return _STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


class ClientError(Exception):
    """Error returned to the API client with an explicit HTTP status"""

    def __init__(self, error: Error, status_code: Optional[int] = None):
        self.error = error
        self.status_code = status_code or status_for(error)
        super().__init__(error.message)


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error.model_dump(exclude_none=True)},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies use the same envelope as engine validation errors"""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    error = Error(
        code=ValidationError.code,
        message=message,
        details={"errors": [
            {"loc": [str(part) for part in e.get("loc", ())], "msg": e.get("msg")}
            for e in errors
        ]},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": error.model_dump(exclude_none=True)},
    )
