"""Ticket state machine and the FIFO serving queue.

Ticket: waiting -> serving -> done, with skipped reachable from waiting or
serving. Ticket changes are mirrored onto the owning Request: a served
Ticket puts the Request in service and a done Ticket completes it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..config import EngineConfig
from ..data.repositories.request_repository import RequestRepository
from ..data.repositories.ticket_repository import TicketRepository
from ..errors import ConflictError, DuplicateKeyError, EmptyQueueError, NotFoundError, ValidationError
from ..models import DisplayBoard, Request, RequestStatus, Ticket, TicketStatus
from ..roles import Actor, Role, require_role
from ..sequence import SequenceAllocator, Series
from ..shared.dates import day_bounds, local_day, utc_now
from ..transitions import ensure_transition
from .status import move_request, move_ticket

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_TYPE = "certificate"

# Upper bound on tickets read for boards and idle-counter checks
BOARD_LIMIT = 200

# Request status implied by a Ticket entering a status
MIRRORED_REQUEST_STATUS: dict[TicketStatus, RequestStatus] = {
    TicketStatus.SERVING: RequestStatus.SERVING,
    TicketStatus.DONE: RequestStatus.COMPLETED,
}


class QueueLifecycle:
    """Issues Tickets and moves them through the counter queue."""

    def __init__(
        self,
        tickets: TicketRepository,
        requests: RequestRepository,
        sequence: SequenceAllocator,
        config: EngineConfig,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.tickets = tickets
        self.requests = requests
        self.sequence = sequence
        self.config = config
        self.clock = clock

    def create(
        self,
        request_id: str,
        *,
        service_type: str = DEFAULT_SERVICE_TYPE,
        now: datetime | None = None,
    ) -> Ticket:
        """Issue a waiting Ticket for a pending Request and move the Request to queued.

        Public: kiosks call this without an actor.

        Raises:
            NotFoundError: the Request does not exist
            ConflictError: the Request already has a Ticket, or the ticket
                number was taken concurrently
            InvalidTransitionError: the Request is not pending
        """
        now = now or self.clock()
        request = self.requests.get(request_id)
        if request is None:
            raise NotFoundError(f"Request {request_id} not found", request_id=request_id)

        existing = self.tickets.get_by_request(request_id)
        if existing is not None:
            raise ConflictError(
                f"Request {request.request_number} already has ticket {existing.ticket_number}",
                request_id=request_id,
            )
        ensure_transition(request.status, RequestStatus.QUEUED)

        ticket_number = self.sequence.reserve(Series.TICKET, now)
        try:
            ticket = self.tickets.create(
                Ticket(request_id=request_id, ticket_number=ticket_number, service_type=service_type, created_at=now)
            )
        except DuplicateKeyError as e:
            raise ConflictError(
                f"Request {request.request_number} already has a ticket", request_id=request_id
            ) from e

        move_request(self.requests, request, RequestStatus.QUEUED, now)
        logger.info(f"Issued ticket {ticket_number} for request {request.request_number}")
        return ticket

    def _get_ticket(self, ticket_id: str) -> Ticket:
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            raise NotFoundError(f"Ticket {ticket_id} not found", ticket_id=ticket_id)
        return ticket

    def _next_idle_counter(self) -> int | None:
        """Lowest counter number with no ticket in service, or None."""
        if self.config.counter_count <= 0:
            return None
        busy = {t.counter for t in self.tickets.list_by_status(TicketStatus.SERVING, BOARD_LIMIT)}
        for counter in range(1, self.config.counter_count + 1):
            if counter not in busy:
                return counter
        return None

    def _mirror_target(self, ticket: Ticket, target: TicketStatus) -> tuple[Request | None, RequestStatus | None]:
        """Find the Request change implied by moving ticket to target, checking it is allowed."""
        request_target = MIRRORED_REQUEST_STATUS.get(target)
        request = self.requests.get(ticket.request_id)
        if request is None:
            logger.warning(f"Ticket {ticket.ticket_number} refers to missing request {ticket.request_id}")
            return None, None
        if request_target is None or request.status is request_target:
            return request, None
        ensure_transition(request.status, request_target)
        return request, request_target

    def _apply(
        self,
        staff: Actor,
        ticket: Ticket,
        target: TicketStatus,
        counter: int | None = None,
    ) -> Ticket:
        # Validate both moves before writing either
        ensure_transition(ticket.status, target)
        request, request_target = self._mirror_target(ticket, target)

        now = self.clock()
        served_by = staff.user_id if target is TicketStatus.SERVING else None
        updated = move_ticket(self.tickets, ticket, target, now, served_by=served_by, counter=counter)
        if request is not None and request_target is not None:
            move_request(self.requests, request, request_target, now)
        return updated

    def process_next(self, actor: Actor | None, counter: int | None = None) -> Ticket:
        """Serve the oldest waiting Ticket.

        The Ticket is assigned the given counter, else the next idle counter
        when counters are configured.

        Raises:
            EmptyQueueError: nothing is waiting; no state is changed
        """
        staff = require_role(actor, Role.STAFF, "process the queue")
        ticket = self.tickets.oldest_waiting()
        if ticket is None:
            raise EmptyQueueError("No one is waiting in the queue")

        if counter is None:
            counter = self._next_idle_counter()
        return self._apply(staff, ticket, TicketStatus.SERVING, counter=counter)

    def assign_counter(self, actor: Actor | None, ticket_id: str, counter: int) -> Ticket:
        require_role(actor, Role.STAFF, "assign counters")
        if counter < 1:
            raise ValidationError("Counter numbers start at 1", counter=counter)
        ticket = self._get_ticket(ticket_id)
        if ticket.status.is_terminal:
            raise ValidationError(f"Ticket {ticket.ticket_number} is already {ticket.status.value}")

        assert ticket.id is not None
        return self.tickets.update(ticket.id, {"counter": counter})

    def update_status(
        self,
        actor: Actor | None,
        ticket_id: str,
        status: TicketStatus,
        counter: int | None = None,
    ) -> Ticket:
        """Manually move a Ticket, mirroring serving/done onto its Request.

        Setting the current status again only records the counter, if given.
        """
        staff = require_role(actor, Role.STAFF, "update tickets")
        ticket = self._get_ticket(ticket_id)
        if status is ticket.status:
            if counter is not None:
                return self.assign_counter(staff, ticket_id, counter)
            return ticket
        return self._apply(staff, ticket, status, counter=counter)

    def mark_done(self, actor: Actor | None, ticket_id: str) -> Ticket:
        """Close a Ticket and complete its Request with the same completion time."""
        staff = require_role(actor, Role.STAFF, "finish tickets")
        return self._apply(staff, self._get_ticket(ticket_id), TicketStatus.DONE)

    # ---- reads ---------------------------------------------------------

    def get_by_request(self, request_id: str) -> Ticket | None:
        return self.tickets.get_by_request(request_id)

    def get_by_number(self, ticket_number: str, on: datetime | None = None) -> Ticket | None:
        """Find a ticket issued on the local day of on (today by default)."""
        day = local_day(on or self.clock(), self.config.zone)
        start, end = day_bounds(day, self.config.zone)
        return self.tickets.get_by_number(ticket_number, start, end)

    def list_by_status(self, status: TicketStatus, counter: int | None = None, limit: int = 100) -> list[Ticket]:
        return self.tickets.list_by_status(status, limit, counter=counter)

    def display_board(self, done_limit: int = 10) -> DisplayBoard:
        """Public board: waiting and serving oldest first, most recently done first."""
        return DisplayBoard(
            waiting=self.tickets.list_by_status(TicketStatus.WAITING, BOARD_LIMIT),
            serving=self.tickets.list_by_status(TicketStatus.SERVING, BOARD_LIMIT),
            done=self.tickets.list_by_status(TicketStatus.DONE, done_limit, oldest_first=False),
        )
