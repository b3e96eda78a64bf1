"""Application errors and their HTTP mapping."""

from typing import Any

from fastapi import status


class AppError(Exception):
    """Base error rendered as ``{"error": message}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        body.update({key: value for key, value in self.extra.items() if value is not None})
        return body


class ValidationError(AppError):
    """Malformed or missing input. Carries per-field ``details``."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message, details=details)


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Schedule overlap or duplicate class."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, conflict: dict[str, Any] | None = None) -> None:
        super().__init__(message, conflict=conflict)
