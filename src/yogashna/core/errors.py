"""Domain exceptions.

Core modules raise these; the web layer maps each class to an HTTP status
and renders the error envelope.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for errors surfaced to API clients.

    Attributes:
        message: Human-readable message
        code: Optional machine-readable code (e.g. 'PROGRAM_NOT_ENROLLED')
        extra: Additional fields merged into the error body
    """

    def __init__(self, message: str, code: str | None = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.extra = extra


class BadRequestError(DomainError):
    """Input is well-formed but not acceptable (400)."""


class ForbiddenError(DomainError):
    """Caller may not perform the operation (403)."""


class NotFoundError(DomainError):
    """Referenced entity does not exist (404)."""


class ConflictError(DomainError):
    """Operation conflicts with current state or limits (409)."""


class NotAvailableError(DomainError):
    """Operation is not available for this entity yet (501)."""
