"""
Domain exceptions raised by services and translated into the standard
ErrorResponse envelope by the handlers registered in franchise_api.api.main.
"""
from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base class for business-rule failures carrying an HTTP status code."""

    status_code: int = 400
    error_type: str = "domain_error"

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class BadRequestError(DomainError):
    """Input is well-formed but violates a business rule (400)."""
    status_code = 400
    error_type = "bad_request"


class PermissionDeniedError(DomainError):
    """The principal may not perform the operation on this resource (403)."""
    status_code = 403
    error_type = "forbidden"


class NotFoundError(DomainError):
    """The requested resource does not exist (404)."""
    status_code = 404
    error_type = "not_found"


class ConflictError(DomainError):
    """Uniqueness or state conflict (409)."""
    status_code = 409
    error_type = "conflict"
