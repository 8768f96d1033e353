"""Status writes shared by the request and queue lifecycles.

Both lifecycles move Requests and Tickets; these helpers check the
transition table and stamp the matching timestamps in one write.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..data.repositories.request_repository import RequestRepository
from ..data.repositories.ticket_repository import TicketRepository
from ..models import Request, RequestStatus, Ticket, TicketStatus
from ..transitions import ensure_transition

logger = logging.getLogger(__name__)


def move_request(requests: RequestRepository, request: Request, target: RequestStatus, now: datetime) -> Request:
    """Transition a Request, stamping completed_at or cancelled_at."""
    ensure_transition(request.status, target)
    fields: dict[str, Any] = {"status": target}
    if target is RequestStatus.COMPLETED:
        fields["completed_at"] = now
    elif target is RequestStatus.CANCELLED:
        fields["cancelled_at"] = now

    assert request.id is not None
    updated = requests.update(request.id, fields)
    logger.info(f"Request {request.request_number}: {request.status.value} -> {target.value}")
    return updated


def move_ticket(
    tickets: TicketRepository,
    ticket: Ticket,
    target: TicketStatus,
    now: datetime,
    served_by: str | None = None,
    counter: int | None = None,
) -> Ticket:
    """Transition a Ticket, stamping started_at/served_by on serving and completed_at on done."""
    ensure_transition(ticket.status, target)
    fields: dict[str, Any] = {"status": target}
    if target is TicketStatus.SERVING:
        fields["started_at"] = now
        if served_by:
            fields["served_by"] = served_by
    elif target is TicketStatus.DONE:
        fields["completed_at"] = now
    if counter is not None:
        fields["counter"] = counter

    assert ticket.id is not None
    updated = tickets.update(ticket.id, fields)
    logger.info(f"Ticket {ticket.ticket_number}: {ticket.status.value} -> {target.value}")
    return updated
