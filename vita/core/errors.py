"""
Error taxonomy shared by services, repositories and the HTTP layer.

Services and repositories raise these; the app factory registers handlers that
turn them into `{"errorCode", "message"[, "fields"]}` JSON responses.
"""

from __future__ import annotations

from typing import Mapping, Sequence


class VitaError(Exception):
    """Base class for errors that map to a client-visible response."""

    status_code = 500
    error_code = "SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"errorCode": self.error_code, "message": self.message}


class ValidationError(VitaError):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Check the highlighted fields"

    def __init__(self, fields: Mapping[str, Sequence[str]] | None = None, message: str | None = None):
        super().__init__(message)
        self.fields = {name: list(msgs) for name, msgs in (fields or {}).items()}

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["fields"] = self.fields
        return body


class NothingToUpdateError(VitaError):
    status_code = 400
    error_code = "NOTHING_TO_UPDATE"
    default_message = "No fields to update"


class AuthenticationError(VitaError):
    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Not authorized"


class NotFoundError(VitaError):
    """Missing resource, or one owned by somebody else (indistinguishable on purpose)."""

    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Not found"


class ConflictError(VitaError):
    status_code = 400
    error_code = "CONFLICT"
    default_message = "Conflict"


class UserExistsError(ConflictError):
    error_code = "USER_EXISTS"
    default_message = "User already registered"


class InvalidCredentialsError(VitaError):
    status_code = 400
    error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class RateLimitedError(VitaError):
    status_code = 429
    error_code = "RATE_LIMITED"
    default_message = "Too many requests. Try again shortly."


class ServerError(VitaError):
    """Generic failure; the detail is logged, never sent to the caller."""


class StorageError(ServerError):
    """The demo data file cannot be read or written."""
