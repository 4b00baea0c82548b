"""Service-layer errors and their HTTP rendering"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from classpass.core.logging import get_logger
from classpass.schemas.responses import ErrorResponse, ErrorDetail

logger = get_logger(__name__)


class ServiceError(Exception):
    """
    Business rule violation raised by a service.

    Carries a stable machine-readable code for clients and the HTTP
    status the API layer should answer with.
    """
    code = "SERVICE_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, code: str = None, status_code: int = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code


class NotFoundError(ServiceError):
    code = "RESOURCE_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(ServiceError):
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ServiceError):
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class AuthenticationError(ServiceError):
    code = "AUTHENTICATION_FAILED"
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(ServiceError):
    code = "PERMISSION_DENIED"
    status_code = status.HTTP_403_FORBIDDEN


class QuotaExceededError(ServiceError):
    code = "QUOTA_EXCEEDED"
    status_code = status.HTTP_403_FORBIDDEN


class InsufficientCreditsError(ServiceError):
    code = "INSUFFICIENT_CREDITS"
    status_code = status.HTTP_400_BAD_REQUEST


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render ServiceError as the standard error envelope"""
    logger.info(
        "Service error",
        extra={
            "path": request.url.path,
            "code": exc.code,
            "detail": exc.message,
            "correlation_id": getattr(request.state, "request_id", None),
        }
    )
    body = ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())
