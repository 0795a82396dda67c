"""Service-layer exceptions, translated to HTTP responses in ``main``."""
from __future__ import annotations

from fastapi import status


class QuizHubError(Exception):
    """Base class for business-rule failures raised by the services."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QuizHubError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(QuizHubError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(QuizHubError):
    status_code = status.HTTP_409_CONFLICT


class DuplicateEmailError(ConflictError):
    """Registration with an email that already has an account.

    Reported as 400 to keep the registration endpoint's error contract.
    """

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(QuizHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
