"""
Error taxonomy.

Services raise these; REST routes let FastAPI render them as
``{"detail": ...}``, the function endpoints turn them into their own
``{"error": ...}`` bodies.
"""

from typing import Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class AuthenticationRequired(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class AccessDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation failed"


class CapacityError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Tournament is full"


class DuplicateRegistration(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already registered for this tournament"


class RegistrationStateError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Registration is not pending"


class UpstreamError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "AI request failed"


class ServiceUnavailable(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Service is not configured"
