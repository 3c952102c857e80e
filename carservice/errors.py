"""Domain errors raised by the services and translated to HTTP responses in ``main``."""

from fastapi import status


class ServiceError(Exception):
    """Base class for failures that are safe to report to the client."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "All required fields must be provided"


class DuplicateUsername(ServiceError):
    # Surfaced as 400 like the other signup rejections.
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Username already exists"


class InvalidCredentials(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Booking not found"
