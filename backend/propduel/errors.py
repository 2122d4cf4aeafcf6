from __future__ import annotations


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Malformed input or an operation attempted in the wrong state."""


class AuthorizationError(DomainError):
    """The caller may not perform this operation on the entity."""


class ConflictError(DomainError):
    """Duplicate participation or a lost status race."""


class NotFoundError(DomainError):
    status_code = 404


class UpstreamError(DomainError):
    """The third-party projections feed failed and nothing is cached."""

    status_code = 502
