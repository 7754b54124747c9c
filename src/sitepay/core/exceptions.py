from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable machine-readable ``code`` and the HTTP
    status the API layer renders it with.
    """

    code = "DOMAIN_ERROR"
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"
    http_status = 400


class NotFoundError(DomainError):
    """Referenced entity is missing or outside the caller's ownership scope."""

    code = "NOT_FOUND"
    http_status = 404


class ForbiddenError(DomainError):
    """Raised when the caller may not act on an existing record."""

    code = "FORBIDDEN"
    http_status = 403


class ConflictError(DomainError):
    """Uniqueness violation, or a concurrent writer changed the row first."""

    code = "CONFLICT"
    http_status = 409

    def __init__(self, message: str, *, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["retryable"] = self.retryable
        return data


class InvalidStateError(DomainError):
    """Operation is not allowed from the record's current status."""

    code = "INVALID_STATE"
    http_status = 400


class AuthenticationError(DomainError):
    """Raised when no authenticated identity accompanies the call."""

    code = "UNAUTHENTICATED"
    http_status = 401
