"""Domain exceptions."""

from __future__ import annotations


class DompetkuError(Exception):
    """Base class for every error raised by this package."""


class SessionStoreError(DompetkuError):
    """Failure persisting or loading a dialogue session."""


class FinanceBackendError(DompetkuError):
    """Failure reported by a persistence collaborator."""


class ValidationFailed(FinanceBackendError):
    """The collaborator rejected the payload."""


class NotFound(FinanceBackendError):
    """The referenced budget, goal or transaction does not exist."""


class Conflict(FinanceBackendError):
    """The write conflicts with existing data."""
