class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is malformed or out of policy."""


class AuthenticationError(DomainError):
    """Raised when a request carries no authenticated identity."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when an operation expects state that does not exist."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when a mutation would break a session/break invariant."""

    status_code = 409


class StorageError(DomainError):
    """Raised when the underlying storage fails.

    The message is never shown to API callers.
    """

    status_code = 500
