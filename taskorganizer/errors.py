# Rev 0.1.0
"""Error taxonomy shared by repositories, services and view models."""
from __future__ import annotations


class OrganizerError(Exception):
    """Base class for every error raised by taskorganizer."""


class ValidationError(OrganizerError):
    """Caller-supplied input violates a precondition (e.g. empty title)."""


class MissingReferenceError(OrganizerError):
    """A referenced row (category) does not exist."""


class TransientConnectivityError(OrganizerError):
    """Database unreachable, pool exhausted or not ready yet."""


class PoolClosedError(TransientConnectivityError):
    pass


class DatabaseNotReadyError(TransientConnectivityError):
    pass


class TransactionIntegrityError(OrganizerError):
    """A multi-step transaction found state that forces a rollback."""


class CategoryNotFoundError(TransactionIntegrityError):
    pass


class StartupError(OrganizerError):
    """Readiness wait exhausted its attempts; fatal for the application."""
