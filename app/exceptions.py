from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base for errors that carry their own HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class UnauthorizedException(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class ForbiddenException(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Admin privileges required"


class ValidationException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class NotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictException(AppException):
    """A business rule would be violated; nothing was written."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"
