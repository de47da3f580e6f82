"""
Application error kinds.

Services raise these; ``libs.common.error_handler`` turns them into the
``{"message": ..., "errors": ...}`` JSON envelope with the matching status.
"""

from typing import Optional

from fastapi import status

FieldErrors = dict[str, list[str]]


class AppError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An error occurred while processing your request."

    def __init__(self, message: Optional[str] = None, errors: Optional[FieldErrors] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, "errors": self.errors}


class ValidationFailed(AppError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "The given data was invalid."

    def __init__(self, errors: FieldErrors, message: Optional[str] = None):
        super().__init__(message, errors)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthenticated."


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "This action is unauthorized."


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "The request conflicts with the current state of the resource."


class InvalidCredentials(AppError):
    """Login failure. Deliberately identical for unknown email and wrong password."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "The provided credentials are incorrect."

    def __init__(self):
        super().__init__(errors={"email": [self.default_message]})
