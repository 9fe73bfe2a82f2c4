"""
Error kinds raised by the ShipRate core.

All of them propagate unchanged to the caller; nothing here is retried.
"""

from __future__ import annotations


class ShipRateError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class Unauthenticated(ShipRateError):
    """No caller identity was supplied."""

    def __init__(self, message: str = "User is not authenticated.") -> None:
        super().__init__(message)


class InvalidArgument(ShipRateError):
    """A required identifying field is missing."""


class StoreUnavailable(ShipRateError):
    """The document store failed (connection, I/O, constraint, ...)."""


class NotFound(ShipRateError):
    """A referenced document does not exist."""


class PermissionDenied(ShipRateError):
    """The caller is not allowed to change the document."""
