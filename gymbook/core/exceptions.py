"""
Domain errors raised by the booking core.

Routers never catch these; `gymbook.main` turns any `DomainError` into a
JSON response using the class `status_code`.
"""
from typing import Any, List, Optional


class DomainError(Exception):
    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[List[Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details or []

    def to_dict(self) -> dict:
        body = {"detail": self.message}
        if self.field:
            body["field"] = self.field
        if self.details:
            body["errors"] = self.details
        return body


class ValidationError(DomainError):
    """Malformed or missing input."""
    status_code = 400


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """The request clashes with current state; re-read and retry is possible."""
    status_code = 409


class AuthorizationError(DomainError):
    status_code = 403


class TemporalPolicyError(DomainError):
    """Too late: booking in the past, or inside the cancellation cutoff."""
    status_code = 400


class InternalError(DomainError):
    status_code = 500

    def to_dict(self) -> dict:
        return {"detail": "Internal server error"}
