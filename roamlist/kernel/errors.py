"""
Typed error taxonomy for the core.

Mutations raise these directly and callers report them; none is transient,
so nothing here is retried. Read paths never raise the authentication or
authorization errors: they return empty results instead.
"""

from typing import Optional


class RoamlistError(Exception):
    """Base error for all core operations."""

    code = "error"

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class AuthenticationRequired(RoamlistError):
    """No principal could be resolved from the supplied credential."""

    code = "authentication_required"

    def __init__(self, message: str = "Not authenticated", **kwargs):
        super().__init__(message, **kwargs)


class AuthorizationDenied(RoamlistError):
    """The principal is resolved but does not own the resource or scope."""

    code = "authorization_denied"

    def __init__(self, message: str = "Not authorized", **kwargs):
        super().__init__(message, **kwargs)


class NotFound(RoamlistError):
    """The referenced entity does not exist (or is concealed from the caller)."""

    code = "not_found"


class DuplicateConstraintViolation(RoamlistError):
    """An insert would break a uniqueness invariant."""

    code = "duplicate"


class ValidationError(RoamlistError):
    """Malformed input: negative rank, unknown day, illegal transition, ..."""

    code = "validation_error"
