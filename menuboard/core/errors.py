"""Expected failure types, each mapped to an HTTP status by the app."""

from __future__ import annotations

from fastapi import status


class AppError(Exception):
    """Base error for expected failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None

    def to_body(self) -> dict:
        return {"detail": self.message}


class Unauthenticated(AppError):
    """No usable credentials. Subclasses exist for logging only."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"
    reason = "unauthenticated"

    @property
    def headers(self) -> dict[str, str] | None:
        return {"WWW-Authenticate": "Bearer"}


class MissingToken(Unauthenticated):
    reason = "missing_token"


class InvalidToken(Unauthenticated):
    reason = "invalid_token"


class UnknownPrincipal(Unauthenticated):
    reason = "unknown_principal"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class ValidationFailed(AppError):
    """Input rejected before reaching storage; carries field-level detail."""

    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    default_message = "Validation failed"

    def __init__(self, errors: list[dict], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationFailed:
        return cls([{"field": field, "message": message, "type": "value_error"}])

    def to_body(self) -> dict:
        return {"detail": self.message, "errors": self.errors}
