"""Failure taxonomy for identity resolution."""

from __future__ import annotations


class ResolutionError(RuntimeError):
    """Base class for every failure surfaced by the resolver."""


class InvalidFragmentError(ResolutionError, ValueError):
    """Raised when a fragment carries neither an email nor a phone number."""


class ConflictError(ResolutionError):
    """A concurrent transaction touched the same rows; the attempt can be retried."""


class StoreUnavailableError(ResolutionError):
    """The contact store cannot be reached or refused to commit."""


class InvariantViolationError(ResolutionError):
    """Stored cluster topology is corrupt (dangling or chained links, no primary)."""

    def __init__(self, message: str, *, contact_id: int | None = None) -> None:
        super().__init__(message)
        self.contact_id = contact_id
