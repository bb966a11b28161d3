"""
Mapping of kernel exceptions onto HTTP responses.

Every PayrollKernelError becomes the ``{success: false, message}`` envelope
with the status below; the message is the exception's ``public_message``,
never driver detail.  Request bodies FastAPI cannot decode are reported as
400 "Invalid request" rather than FastAPI's default 422.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from payroll_kernel.exceptions import (
    AlreadyWithdrawnError,
    CompanyNotFoundError,
    ImmutabilityError,
    NotFoundError,
    PayrollKernelError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("api.errors")

# Checked in order; first isinstance match wins.
_STATUS_BY_ERROR: tuple[tuple[type[PayrollKernelError], int], ...] = (
    (ValidationError, 400),
    (UnauthorizedError, 401),
    (AlreadyWithdrawnError, 403),
    (CompanyNotFoundError, 500),
    (NotFoundError, 404),
    (StorageError, 500),
    (ImmutabilityError, 500),
)


def status_for(exc: PayrollKernelError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


async def handle_kernel_error(request: Request, exc: PayrollKernelError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(
            "request_failed",
            exc_info=exc,
            extra={"path": request.url.path, "status_code": status_code},
        )
    else:
        logger.info(
            "request_rejected",
            extra={
                "path": request.url.path,
                "status_code": status_code,
                "error_code": exc.code,
            },
        )
    return envelope(status_code, exc.public_message)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info(
        "request_body_invalid",
        extra={"path": request.url.path, "errors": len(exc.errors())},
    )
    return envelope(400, "Invalid request")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PayrollKernelError, handle_kernel_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
