"""Custom application exceptions."""

from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """No usable credential after token resolution."""

    def __init__(self, message: str = "Unauthorized - No access token"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class BackendRejectedException(AppException):
    """The backend API answered with a non-2xx status and a reason."""

    def __init__(self, status_code: int, message: str, data: Any = None):
        """Initialize with the backend's own status code and error body."""
        self.data = data
        super().__init__(message, status_code=status_code)


class TransientBackendException(AppException):
    """Transport-level failure while talking to the backend API."""

    def __init__(self, message: str = "Backend API unavailable"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)


class SlotConflictException(AppException):
    """Another actor holds, booked or blocked the slot."""

    def __init__(self, message: str = "Slot is no longer available"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class HoldExpiredException(AppException):
    """The slot hold lapsed before the booking was confirmed."""

    def __init__(self, message: str = "Slot hold has expired"):
        """Initialize with 410 status code."""
        super().__init__(message, status_code=410)
