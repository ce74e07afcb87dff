from fastapi import status
from fastapi.responses import JSONResponse


class ApplicationException(Exception):
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_response(self):
        return JSONResponse(
            status_code=self.status_code,
            content={"error": self.message, "code": type(self).__name__}
        )


class NotFoundError(ApplicationException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class CapacityExceededError(ApplicationException):
    def __init__(self, message: str = "No capacity left"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class ClassFullError(CapacityExceededError):
    def __init__(self, message: str = "Class is full"):
        super().__init__(message)


class SlotTakenError(CapacityExceededError):
    def __init__(self, message: str = "Session is already booked"):
        super().__init__(message)


class AlreadyBookedError(ApplicationException):
    def __init__(self, message: str = "You have already booked this session"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class InsufficientCreditError(ApplicationException):
    def __init__(self, required: int = 0, available: int = 0):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient credits: {required} required, {available} available",
            status.HTTP_400_BAD_REQUEST
        )


class InvalidStateError(ApplicationException):
    def __init__(self, message: str = "Operation not allowed in the current state"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class OnboardingIncompleteError(InvalidStateError):
    def __init__(self, message: str = "Home onboarding must be completed before booking"):
        super().__init__(message)


class PermissionDeniedError(ApplicationException):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class VersionConflictError(ApplicationException):
    def __init__(self, message: str = "The resource was modified by someone else"):
        super().__init__(message, status.HTTP_409_CONFLICT)


class StoreUnavailableError(ApplicationException):
    def __init__(self, message: str = "Service temporarily unavailable, please retry"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)
