"""Allowed status transitions for each entity.

Lifecycles call ``ensure_transition`` before every status write so illegal
moves are rejected in one place instead of at each call site.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from .errors import InvalidTransitionError
from .models import LineItemStatus, PersonStatus, RequestStatus, TicketStatus

S = TypeVar("S", bound=Enum)

REQUEST_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.QUEUED, RequestStatus.CANCELLED}),
    RequestStatus.QUEUED: frozenset({RequestStatus.SERVING, RequestStatus.COMPLETED, RequestStatus.CANCELLED}),
    RequestStatus.SERVING: frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED}),
    RequestStatus.COMPLETED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}

LINE_ITEM_TRANSITIONS: dict[LineItemStatus, frozenset[LineItemStatus]] = {
    LineItemStatus.PENDING: frozenset({LineItemStatus.PRODUCED}),
    LineItemStatus.PRODUCED: frozenset(),
}

TICKET_TRANSITIONS: dict[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.WAITING: frozenset({TicketStatus.SERVING, TicketStatus.SKIPPED}),
    TicketStatus.SERVING: frozenset({TicketStatus.DONE, TicketStatus.SKIPPED}),
    TicketStatus.DONE: frozenset(),
    TicketStatus.SKIPPED: frozenset(),
}

# Provisional records leave the table only through approval or rejection
PERSON_TRANSITIONS: dict[PersonStatus, frozenset[PersonStatus]] = {
    PersonStatus.PROVISIONAL: frozenset({PersonStatus.ACTIVE}),
    PersonStatus.ACTIVE: frozenset({PersonStatus.DECEASED, PersonStatus.RELOCATED}),
    PersonStatus.RELOCATED: frozenset({PersonStatus.ACTIVE, PersonStatus.DECEASED}),
    PersonStatus.DECEASED: frozenset({PersonStatus.ACTIVE}),
}

_TABLES: dict[type[Enum], tuple[str, dict]] = {
    RequestStatus: ("request", REQUEST_TRANSITIONS),
    LineItemStatus: ("line item", LINE_ITEM_TRANSITIONS),
    TicketStatus: ("ticket", TICKET_TRANSITIONS),
    PersonStatus: ("person", PERSON_TRANSITIONS),
}


def can_transition(current: S, target: S) -> bool:
    """Return True if target is reachable from current in one step."""
    _, table = _TABLES[type(current)]
    return target in table[current]


def ensure_transition(current: S, target: S) -> S:
    """Return target if the move is allowed, else raise InvalidTransitionError."""
    entity, table = _TABLES[type(current)]
    if target not in table[current]:
        raise InvalidTransitionError(entity, current.value, target.value)
    return target
