"""
Application exception taxonomy.

Each exception carries the HTTP status the API layer renders it with.
"""

from fastapi import status


class AppException(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppException):
    """Missing, duplicate or otherwise unacceptable input."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppException):
    """Missing credentials or unknown user."""

    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidToken(AuthenticationError):
    """Token failed signature, structure or expiry checks."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND


class StorageError(AppException):
    """Underlying persistence failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
