"""Kiosk intake: one submission becomes a Person, a Request and a Ticket.

The steps are separate store writes, so intake runs them as a saga. Each
completed step registers an undo; if a later step fails, the undos run in
reverse order and the original error is raised. An undo that fails stops
the unwinding and leaves the pending Request for ``IntakeRepair``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime

from .data.repositories.person_repository import PersonRepository
from .data.repositories.request_repository import RequestRepository
from .errors import NotFoundError, ValidationError
from .lifecycle.queue_lifecycle import DEFAULT_SERVICE_TYPE, QueueLifecycle
from .lifecycle.request_lifecycle import RequestLifecycle
from .lifecycle.status import move_request, move_ticket
from .models import ItemRequest, Person, RequestStatus, TicketStatus
from .persons import PersonRegistry
from .shared.dates import utc_now

logger = logging.getLogger(__name__)


@dataclass
class GuestDetails:
    """Details a first-time visitor types in at the kiosk"""

    first_name: str
    last_name: str
    birthdate: date
    middle_name: str = ""
    suffix: str | None = None
    location: str = ""


@dataclass
class IntakeSubmission:
    """A kiosk submission: a known person or a guest, and the documents wanted"""

    items: list[ItemRequest]
    person_id: str | None = None
    guest: GuestDetails | None = None
    service_type: str = DEFAULT_SERVICE_TYPE


@dataclass
class IntakeReceipt:
    """What the kiosk prints for the visitor"""

    ticket_number: str
    request_number: str
    request_id: str
    person_id: str
    total_price: int


@dataclass
class _Saga:
    undo_steps: list[tuple[str, Callable[[], None]]] = field(default_factory=list)

    def on_failure(self, description: str, undo: Callable[[], None]) -> None:
        self.undo_steps.append((description, undo))

    def unwind(self) -> None:
        for description, undo in reversed(self.undo_steps):
            try:
                undo()
                logger.debug(f"Intake rollback: {description}")
            except Exception:
                logger.error(f"Intake rollback failed: {description}; left for repair", exc_info=True)
                return


class IntakeOrchestrator:
    """Turns a kiosk submission into a queued Request."""

    def __init__(
        self,
        registry: PersonRegistry,
        request_lifecycle: RequestLifecycle,
        queue_lifecycle: QueueLifecycle,
        persons: PersonRepository,
        requests: RequestRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.registry = registry
        self.request_lifecycle = request_lifecycle
        self.queue_lifecycle = queue_lifecycle
        self.persons = persons
        self.requests = requests
        self.clock = clock

    def submit(self, submission: IntakeSubmission) -> IntakeReceipt:
        """Register or reuse the person, create the Request and issue its Ticket.

        Raises:
            ValidationError: neither or both of person_id/guest given, or the
                items fail validation
            NotFoundError: person_id does not exist
            ConflictError: a number could not be allocated
        """
        if (submission.person_id is None) == (submission.guest is None):
            raise ValidationError("Provide either an existing person or guest details")

        # Validate items before writing anything
        self.request_lifecycle.price_items(submission.items)

        now = self.clock()
        saga = _Saga()
        try:
            person_id = self._resolve_person(submission, saga)

            detail = self.request_lifecycle.create(person_id, submission.items, now=now)
            request = detail.request
            assert request.id is not None
            saga.on_failure(
                f"cancel request {request.request_number}",
                lambda: self._cancel(request.id),
            )

            ticket = self.queue_lifecycle.create(request.id, service_type=submission.service_type, now=now)
        except Exception:
            saga.unwind()
            raise

        logger.info(f"Intake complete: {request.request_number} ticket {ticket.ticket_number}")
        return IntakeReceipt(
            ticket_number=ticket.ticket_number,
            request_number=request.request_number,
            request_id=request.id,
            person_id=person_id,
            total_price=request.total_price,
        )

    def _resolve_person(self, submission: IntakeSubmission, saga: _Saga) -> str:
        if submission.person_id is not None:
            if self.persons.get(submission.person_id) is None:
                raise NotFoundError(f"Person {submission.person_id} not found", person_id=submission.person_id)
            return submission.person_id

        guest = submission.guest
        assert guest is not None
        person = self.registry.register_provisional(
            Person(
                first_name=guest.first_name,
                middle_name=guest.middle_name,
                last_name=guest.last_name,
                suffix=guest.suffix,
                birthdate=guest.birthdate,
                location=guest.location,
            )
        )
        person_id = person.id
        assert person_id is not None
        saga.on_failure(f"delete provisional person {person_id}", lambda: self._discard_person(person_id))
        return person_id

    def _cancel(self, request_id: str) -> None:
        now = self.clock()
        request = self.requests.get(request_id)
        if request is not None and not request.status.is_terminal:
            move_request(self.requests, request, RequestStatus.CANCELLED, now)
        ticket = self.queue_lifecycle.get_by_request(request_id)
        if ticket is not None and not ticket.status.is_terminal:
            move_ticket(self.queue_lifecycle.tickets, ticket, TicketStatus.SKIPPED, now)

    def _discard_person(self, person_id: str) -> None:
        # A cancelled Request still refers to the person; leave it for admin review
        if self.requests.list_for_person(person_id, 1):
            logger.info(f"Keeping provisional person {person_id}: referenced by a cancelled request")
            return
        self.persons.delete(person_id)
