"""Error kinds raised by services and dependencies, rendered as {"error": message}."""

from fastapi import status


class AppError(Exception):
    """Base error with an HTTP status and a client-safe message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(AppError):
    """Missing, invalid or expired bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthenticated"


class Forbidden(AppError):
    """Valid identity without the required role."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class StoreUnavailable(AppError):
    """Persistence failure; the message never carries driver details."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
