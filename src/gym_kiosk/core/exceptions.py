class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when an admin operation targets a member that does not exist."""


class StorageError(Exception):
    """Raised when the record store cannot be reached or rejects an operation."""
