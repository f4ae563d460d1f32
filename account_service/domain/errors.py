"""Domain-level exceptions.

The account service raises these errors to express business rule violations.
Route handlers catch them and map them to HTTP status codes.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainError, ValueError):
    """Input is missing or malformed."""


class NotFoundError(DomainError):
    """Referenced account does not exist."""


class ConflictError(DomainError):
    """Another account already holds the same normalised email."""


class StorageError(DomainError):
    """Unexpected persistence failure, not classified further."""
