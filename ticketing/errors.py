"""Engine error taxonomy.

Every error raised by the engine derives from TicketingError so callers can
catch the whole family. Messages are written to be shown to staff verbatim.
"""

from __future__ import annotations

from typing import Any


class TicketingError(Exception):
    """Base exception for engine errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(TicketingError):
    """Raised when input is malformed or violates a policy rule."""

    pass


class AuthorizationError(TicketingError):
    """Raised when the caller lacks the capability an operation requires."""

    pass


class NotFoundError(TicketingError):
    """Raised when a referenced record does not exist."""

    pass


class ConflictError(TicketingError):
    """Raised on duplicate identifiers or a second Ticket for a Request.

    Indicates a race rather than a permanent condition; the caller may retry.
    """

    pass


class EmptyQueueError(TicketingError):
    """Raised when no waiting Ticket exists. A normal outcome, not a fault."""

    pass


class InvalidTransitionError(TicketingError):
    """Raised when a status change is not allowed by the transition table."""

    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(
            f"Cannot move {entity} from '{current}' to '{target}'",
            entity=entity,
            current=current,
            target=target,
        )
        self.entity = entity
        self.current = current
        self.target = target


class StoreError(TicketingError):
    """Raised when the record store fails an operation."""

    pass


class DuplicateKeyError(StoreError):
    """Raised when a write violates a unique index in the record store."""

    pass
