"""Request and LineItem state machine.

A Request moves pending -> queued -> serving -> completed, with cancel
available from any non-terminal state. Its LineItems move pending ->
produced independently as staff print each document.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from ..config import EngineConfig
from ..data.repositories.document_type_repository import DocumentTypeRepository
from ..data.repositories.line_item_repository import LineItemRepository
from ..data.repositories.person_repository import PersonRepository
from ..data.repositories.request_repository import RequestRepository
from ..data.repositories.ticket_repository import TicketRepository
from ..errors import ConflictError, DuplicateKeyError, NotFoundError, ValidationError
from ..models import (
    DocumentType,
    ItemRequest,
    LineItem,
    LineItemDetail,
    LineItemStatus,
    Request,
    RequestDetail,
    RequestStatus,
    RequestSummary,
    StaffBoard,
    TicketStatus,
)
from ..roles import Actor, Role, require_role
from ..sequence import SequenceAllocator, Series
from ..shared.dates import utc_now
from ..transitions import ensure_transition
from .status import move_request, move_ticket

logger = logging.getLogger(__name__)


class RequestLifecycle:
    """Creates Requests and drives them and their LineItems through their states."""

    def __init__(
        self,
        requests: RequestRepository,
        items: LineItemRepository,
        document_types: DocumentTypeRepository,
        persons: PersonRepository,
        tickets: TicketRepository,
        sequence: SequenceAllocator,
        config: EngineConfig,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.requests = requests
        self.items = items
        self.document_types = document_types
        self.persons = persons
        self.tickets = tickets
        self.sequence = sequence
        self.config = config
        self.clock = clock

    # ---- intake side ---------------------------------------------------

    def price_items(self, items: Sequence[ItemRequest]) -> tuple[int, dict[str, DocumentType]]:
        """Validate requested items and return the total price with the resolved types.

        Raises:
            ValidationError: no items, too many items, a missing or inactive
                type, or a blank purpose where the type requires one
        """
        if not items:
            raise ValidationError("At least one document must be requested")
        if len(items) > self.config.max_line_items:
            raise ValidationError(
                f"A request may contain at most {self.config.max_line_items} documents",
                count=len(items),
            )

        types = self.document_types.get_many(item.document_type_id for item in items)
        total = 0
        for item in items:
            doc_type = types.get(item.document_type_id)
            if doc_type is None:
                raise ValidationError(
                    f"Document type {item.document_type_id} does not exist",
                    document_type_id=item.document_type_id,
                )
            if not doc_type.is_active:
                raise ValidationError(f"{doc_type.name} is not currently offered", document_type_id=doc_type.id)
            if doc_type.requires_purpose and not item.purpose.strip():
                raise ValidationError(f"A purpose is required for {doc_type.name}", document_type_id=doc_type.id)
            total += doc_type.price
        return total, types

    def create(self, person_id: str, items: Sequence[ItemRequest], *, now: datetime | None = None) -> RequestDetail:
        """Create a pending Request with its pending LineItems.

        Public: kiosks call this without an actor.

        Raises:
            ValidationError: see price_items
            NotFoundError: person_id does not exist
            ConflictError: the request number was taken concurrently
        """
        now = now or self.clock()
        total, types = self.price_items(items)

        person = self.persons.get(person_id)
        if person is None:
            raise NotFoundError(f"Person {person_id} not found", person_id=person_id)

        request_number = self.sequence.reserve(Series.REQUEST, now)
        try:
            request = self.requests.create(
                Request(person_id=person_id, request_number=request_number, total_price=total, requested_at=now)
            )
        except DuplicateKeyError as e:
            raise ConflictError(f"Request number {request_number} already exists", request_number=request_number) from e

        details = []
        try:
            for item in items:
                assert request.id is not None
                created = self.items.create(
                    LineItem(
                        request_id=request.id,
                        document_type_id=item.document_type_id,
                        purpose=item.purpose.strip(),
                        created_at=now,
                    )
                )
                details.append(LineItemDetail(created, types.get(item.document_type_id)))
        except Exception:
            # A Request with only some of its items must not reach the queue
            logger.warning(f"Item insert failed for {request_number}; cancelling it")
            move_request(self.requests, request, RequestStatus.CANCELLED, now)
            raise

        logger.info(f"Created request {request_number} for person {person_id}: {len(details)} items, total {total}")
        return RequestDetail(request=request, person=person, items=details)

    # ---- line items ----------------------------------------------------

    def _get_item(self, line_item_id: str) -> LineItem:
        item = self.items.get(line_item_id)
        if item is None:
            raise NotFoundError(f"Line item {line_item_id} not found", line_item_id=line_item_id)
        return item

    def update_purpose(self, actor: Actor | None, line_item_id: str, purpose: str) -> LineItem:
        require_role(actor, Role.STAFF, "edit document purposes")
        item = self._get_item(line_item_id)
        if item.is_produced:
            raise ValidationError("Cannot change the purpose of a document that has already been produced")

        doc_type = self.document_types.get(item.document_type_id)
        if doc_type is None:
            raise NotFoundError(
                f"Document type {item.document_type_id} not found", document_type_id=item.document_type_id
            )
        purpose = purpose.strip()
        if doc_type.requires_purpose and not purpose:
            raise ValidationError(f"A purpose is required for {doc_type.name}", document_type_id=doc_type.id)

        assert item.id is not None
        return self.items.update(item.id, {"purpose": purpose})

    def mark_produced(self, actor: Actor | None, line_item_id: str) -> LineItem:
        """Mark one document as produced. Already produced items are returned unchanged."""
        require_role(actor, Role.STAFF, "mark documents as produced")
        item = self._get_item(line_item_id)
        if item.is_produced:
            return item

        ensure_transition(item.status, LineItemStatus.PRODUCED)
        assert item.id is not None
        return self.items.update(item.id, {"status": LineItemStatus.PRODUCED, "produced_at": self.clock()})

    def mark_all_produced(self, actor: Actor | None, request_id: str) -> int:
        """Mark every pending item of a Request as produced.

        Returns:
            Number of items changed (0 when everything was already produced)
        """
        require_role(actor, Role.STAFF, "mark documents as produced")
        request = self._get_request(request_id)

        now = self.clock()
        pending = self.items.list_for_request(request_id, self.config.max_line_items, status=LineItemStatus.PENDING)
        for item in pending:
            assert item.id is not None
            self.items.update(item.id, {"status": LineItemStatus.PRODUCED, "produced_at": now})

        if pending:
            logger.info(f"Request {request.request_number}: produced {len(pending)} documents")
        return len(pending)

    # ---- request transitions -------------------------------------------

    def _get_request(self, request_id: str) -> Request:
        request = self.requests.get(request_id)
        if request is None:
            raise NotFoundError(f"Request {request_id} not found", request_id=request_id)
        return request

    def _close_ticket(self, staff: Actor, request_id: str, now: datetime) -> None:
        """Move the Request's open Ticket to done so it leaves the serving queue."""
        ticket = self.tickets.get_by_request(request_id)
        if ticket is None or ticket.status.is_terminal:
            return
        if ticket.status is TicketStatus.WAITING:
            ticket = move_ticket(self.tickets, ticket, TicketStatus.SERVING, now, served_by=staff.user_id)
        move_ticket(self.tickets, ticket, TicketStatus.DONE, now)

    def complete(self, actor: Actor | None, request_id: str) -> Request:
        """Mark a queued or serving Request completed and close its Ticket. Does not inspect its items."""
        staff = require_role(actor, Role.STAFF, "complete requests")
        request = self._get_request(request_id)
        now = self.clock()
        request = move_request(self.requests, request, RequestStatus.COMPLETED, now)
        self._close_ticket(staff, request_id, now)
        return request

    def mark_as_claim(self, actor: Actor | None, request_id: str) -> Request:
        """Mark a Request ready to claim once every document is produced.

        Completes the Request (if not already) and closes its Ticket.
        """
        staff = require_role(actor, Role.STAFF, "mark requests as claim")
        request = self._get_request(request_id)

        items = self.items.list_for_request(request_id, self.config.max_line_items)
        if not items or not all(item.is_produced for item in items):
            raise ValidationError("Cannot mark as claim: not all documents have been produced")

        now = self.clock()
        if request.status is not RequestStatus.COMPLETED:
            request = move_request(self.requests, request, RequestStatus.COMPLETED, now)

        self._close_ticket(staff, request_id, now)
        return request

    def cancel(self, actor: Actor | None, request_id: str) -> Request:
        """Cancel a non-terminal Request; its open Ticket is skipped."""
        require_role(actor, Role.STAFF, "cancel requests")
        request = self._get_request(request_id)
        now = self.clock()
        request = move_request(self.requests, request, RequestStatus.CANCELLED, now)

        ticket = self.tickets.get_by_request(request_id)
        if ticket is not None and not ticket.status.is_terminal:
            move_ticket(self.tickets, ticket, TicketStatus.SKIPPED, now)
        return request

    # ---- reads ---------------------------------------------------------

    def get_detail(self, request_id: str) -> RequestDetail:
        """Request with its person, items (and their types) and ticket."""
        request = self._get_request(request_id)
        items = self.items.list_for_request(request_id, self.config.max_line_items)
        types = self.document_types.get_many(item.document_type_id for item in items)
        return RequestDetail(
            request=request,
            person=self.persons.get(request.person_id),
            items=[LineItemDetail(item, types.get(item.document_type_id)) for item in items],
            ticket=self.tickets.get_by_request(request_id),
        )

    def list_by_status(self, status: RequestStatus, limit: int = 100) -> list[Request]:
        return self.requests.list_by_status(status, limit)

    def list_for_person(self, person_id: str, limit: int = 50) -> list[Request]:
        return self.requests.list_for_person(person_id, limit)

    def _summarize(self, requests: list[Request]) -> list[RequestSummary]:
        summaries = []
        for request in requests:
            assert request.id is not None
            summaries.append(
                RequestSummary(
                    request=request,
                    person=self.persons.get(request.person_id),
                    ticket=self.tickets.get_by_request(request.id),
                )
            )
        return summaries

    def staff_board(self, queued_limit: int = 100, serving_limit: int = 100, completed_limit: int = 20) -> StaffBoard:
        """Requests awaiting service, in service (oldest first) and recently completed (newest first)."""
        return StaffBoard(
            queued=self._summarize(self.requests.list_by_status(RequestStatus.QUEUED, queued_limit)),
            serving=self._summarize(self.requests.list_by_status(RequestStatus.SERVING, serving_limit)),
            completed=self._summarize(
                self.requests.list_by_status(RequestStatus.COMPLETED, completed_limit, oldest_first=False)
            ),
        )
