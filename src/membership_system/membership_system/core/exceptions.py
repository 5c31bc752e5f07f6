from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StorageError(Exception):
    """Raised when a read or write against the storage collaborator fails or times out.

    Recoverable: callers may render a retry-able state. The core never retries.
    """

    retryable = True

    def __init__(self, message: str, *, operation: str | None = None):
        super().__init__(message)
        self.operation = operation
