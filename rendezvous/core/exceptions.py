"""
Application exceptions and the FastAPI handlers that render them.
"""
from uuid import UUID

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rendezvous.core.logger import get_logger

logger = get_logger("errors")


class AppException(Exception):
    """
    Base exception class for application-specific exceptions.
    """
    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class NotFoundError(AppException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)


class AppointmentNotFound(NotFoundError):
    def __init__(self, appointment_id: UUID):
        super().__init__(f"Appointment {appointment_id} not found")
        self.appointment_id = appointment_id


class InvalidStatusTransition(AppException):
    """
    Raised when a lifecycle operation would move an appointment between
    two statuses the transition table does not connect.
    """
    def __init__(self, current: str, target: str, detail: str | None = None):
        super().__init__(
            status.HTTP_409_CONFLICT,
            detail or f"Cannot move appointment from '{current}' to '{target}'",
        )
        self.current = current
        self.target = target


async def app_exception_handler(request: Request, exc: AppException):
    logger.error(f"Application error on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation error",
            "errors": jsonable_errors(exc),
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception instances that JSONResponse cannot encode
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI application.
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
