"""
Domain error taxonomy.

The API layer maps each class onto an HTTP status (see
``rideflow.api.errors``); the realtime channel turns them into ``error``
events.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for errors raised by the core services."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(DomainError):
    """Malformed or missing input."""

    status_code = 400


class NotFoundError(DomainError):
    """Unknown entity id."""

    status_code = 404


class ConflictError(DomainError):
    """Duplicate unique key (email, username, license, business email)."""

    status_code = 400


class TransitionError(DomainError):
    """Raised when a ride status change violates the state machine."""

    status_code = 409


class AuthenticationError(DomainError):
    """Unknown email or wrong password."""

    status_code = 401
