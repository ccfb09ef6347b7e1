"""Domain error hierarchy and the search failure taxonomy."""
from __future__ import annotations

from enum import Enum


class DomainError(Exception):
    """Base for all domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Invalid input or state."""


class AuthorizationError(DomainError):
    """Caller is not allowed to perform the operation."""


class ErrorKind(str, Enum):
    """Classification carried by a failed SearchResult.

    Searches never raise; every failure is reported as one of these values.
    """

    NOT_FOUND = "not-found"
    PRIVATE_SOURCE = "private-source"
    PRIVATE_TARGET = "private-target"
    NO_PATH = "no-path-within-depth"
    UPSTREAM_UNAVAILABLE = "upstream-unavailable"
    INTERNAL_ERROR = "internal-error"

    def swapped(self) -> ErrorKind:
        """Return the classification seen from the opposite search direction."""
        if self is ErrorKind.PRIVATE_SOURCE:
            return ErrorKind.PRIVATE_TARGET
        if self is ErrorKind.PRIVATE_TARGET:
            return ErrorKind.PRIVATE_SOURCE
        return self
