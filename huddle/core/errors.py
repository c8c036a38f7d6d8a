"""Domain errors raised by the coordination services.

Each error carries the HTTP status the routers translate it to.
"""
from fastapi import HTTPException, status


class HuddleError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class Unauthorized(HuddleError):
    """Caller is not the author/owner of the resource."""
    status_code = status.HTTP_403_FORBIDDEN
    code = "UNAUTHORIZED"


class NotFound(HuddleError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class QuotaExceeded(HuddleError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "QUOTA_EXCEEDED"


class ValidationFailed(HuddleError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_FAILED"


class DependencyFailure(HuddleError):
    """An external collaborator (media store, event store) failed."""
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "DEPENDENCY_FAILURE"


def to_http(exc: HuddleError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail={"error": exc.code, "message": exc.message},
    )
