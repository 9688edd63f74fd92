from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Recipe not found") -> None:
        super().__init__(message)


class AuthError(UserError):
    """Raised when credentials or a bearer token are rejected."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class ForbiddenError(UserError):
    """Raised when a verified user touches a resource owned by someone else."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


class ConflictError(UserError):
    """Raised when a unique key (username) is already taken."""

    def __init__(self, message: str = "Username already taken") -> None:
        super().__init__(message)


class UnavailableError(UserError):
    """Raised when the store is not reachable."""

    def __init__(self, message: str = "Database unavailable. Please try again later.") -> None:
        super().__init__(message)


class InternalError(Exception):
    """Opaque server failure; the message is the only thing the caller sees."""

    def __init__(self, message: str = "An unexpected error occurred.") -> None:
        super().__init__(message)
