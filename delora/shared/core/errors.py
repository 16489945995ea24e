"""Error taxonomy for the storefront state core.

Every user-facing failure is a ``StorefrontError``. Stores raise them inside
their own operations and the controller turns them into error status
messages, so none of them reach the host's event dispatcher.
"""

from __future__ import annotations


class StorefrontError(Exception):
    """Base class for recoverable storefront failures.

    The exception message is the human-readable text shown to the shopper.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """A required field is missing or malformed."""


class DuplicateAccountError(StorefrontError):
    """Registration attempted with an email that is already registered."""


class InvalidCredentialsError(StorefrontError):
    """Sign-in failed.

    Raised for an unknown email and for a wrong password alike, so callers
    cannot tell the two apart.
    """


class PersistenceDegraded(StorefrontError):
    """The durable key-value backend is unavailable.

    Never shown to the shopper: the persistence layer logs it as a warning and
    switches to the in-memory store.
    """
