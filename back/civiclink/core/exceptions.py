"""
Domain error taxonomy.

Services raise these; the HTTP layer maps them to status codes in
``civiclink.api.internal.utils.exceptions``.
"""

# Standard library imports
from typing import Any


class CivicLinkError(Exception):
    """Base class for all errors raised by the issue lifecycle core."""

    code: str = "error"
    status_code: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(CivicLinkError):
    """Bad input shape, length or enumeration value. Carries field-level messages."""

    code = "bad_request"
    status_code = 400

    def __init__(self, field_errors: dict[str, str]) -> None:
        message = "; ".join(f"{field}: {msg}" for field, msg in field_errors.items()) or "Invalid input"
        super().__init__(message, details=field_errors)
        self.field_errors = field_errors


class NotFoundError(CivicLinkError):
    code = "not_found"
    status_code = 404


class UnauthorizedError(CivicLinkError):
    """The action needs an authenticated voter, commenter or reporter."""

    code = "unauthorized"
    status_code = 401


class ForbiddenError(CivicLinkError):
    """The actor is authenticated but lacks the admin capability."""

    code = "forbidden"
    status_code = 403


class ConflictError(CivicLinkError):
    """A concurrent write won the compare-and-swap; the caller should retry."""

    code = "conflict"
    status_code = 409


class EnrichmentUnavailable(CivicLinkError):
    """An external AI or geocoding call failed or timed out."""

    code = "enrichment_unavailable"
    status_code = 503


class InvalidVoterError(UnauthorizedError):
    """Raised by the vote ledger when no voter identity is supplied."""


class UnknownIssueError(NotFoundError):
    """Raised by the vote ledger when the issue is outside its scope."""
