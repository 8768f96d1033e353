"""Core domain models for the ticketing engine.

These models represent the records the engine reads and writes and are
independent of the record store; repositories map them to and from stored
records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class PersonStatus(Enum):
    """Registry status of a person

    PROVISIONAL marks records created by a kiosk without staff verification.
    They must later be approved (becoming ACTIVE) or rejected (deleted).
    """

    ACTIVE = "active"
    DECEASED = "deceased"
    RELOCATED = "relocated"
    PROVISIONAL = "provisional"


class RequestStatus(Enum):
    """Status of a visitor request"""

    PENDING = "pending"  # Created, no Ticket yet
    QUEUED = "queued"  # Ticket issued, waiting
    SERVING = "serving"  # At a counter
    COMPLETED = "completed"  # Ready to claim
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.COMPLETED, RequestStatus.CANCELLED)


class LineItemStatus(Enum):
    """Status of a single requested document"""

    PENDING = "pending"
    PRODUCED = "produced"


class TicketStatus(Enum):
    """Status of a queue ticket"""

    WAITING = "waiting"
    SERVING = "serving"
    DONE = "done"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (TicketStatus.DONE, TicketStatus.SKIPPED)


class Confidence(Enum):
    """Duplicate match confidence, ordered by rank"""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


@dataclass
class Person:
    """A registry record for a visitor"""

    first_name: str
    last_name: str
    birthdate: date
    middle_name: str = ""
    suffix: str | None = None
    location: str = ""
    status: PersonStatus = PersonStatus.ACTIVE
    registry_number: str | None = None
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        """Return the name as printed on documents"""
        parts = [self.first_name, self.middle_name, self.last_name]
        name = " ".join(p for p in parts if p)
        if self.suffix:
            name = f"{name} {self.suffix}"
        return name

    @property
    def is_provisional(self) -> bool:
        return self.status == PersonStatus.PROVISIONAL


@dataclass
class DocumentType:
    """Catalog entry for a document that can be requested"""

    name: str
    price: int  # cents
    requires_purpose: bool = False
    is_active: bool = True
    template_key: str = ""
    id: str | None = None


@dataclass
class Request:
    """One visitor transaction"""

    person_id: str
    request_number: str
    total_price: int  # cents
    status: RequestStatus = RequestStatus.PENDING
    requested_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    id: str | None = None


@dataclass
class LineItem:
    """One requested document type within a Request"""

    request_id: str
    document_type_id: str
    purpose: str = ""
    status: LineItemStatus = LineItemStatus.PENDING
    created_at: datetime | None = None
    produced_at: datetime | None = None
    id: str | None = None

    @property
    def is_produced(self) -> bool:
        return self.status == LineItemStatus.PRODUCED


@dataclass
class Ticket:
    """The queue slot tracking service progress for a Request"""

    request_id: str
    ticket_number: str
    status: TicketStatus = TicketStatus.WAITING
    service_type: str = "certificate"
    counter: int | None = None
    served_by: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    id: str | None = None


@dataclass
class ItemRequest:
    """A document the visitor asks for, before it becomes a LineItem"""

    document_type_id: str
    purpose: str = ""


@dataclass
class LineItemDetail:
    """A LineItem with its DocumentType resolved (None if the type was deleted)"""

    item: LineItem
    document_type: DocumentType | None


@dataclass
class RequestDetail:
    """A Request with everything a staff terminal needs to process it"""

    request: Request
    person: Person | None = None
    items: list[LineItemDetail] = field(default_factory=list)
    ticket: Ticket | None = None

    @property
    def all_produced(self) -> bool:
        return bool(self.items) and all(d.item.is_produced for d in self.items)


@dataclass
class DuplicateMatch:
    """A probable duplicate of a person being registered"""

    person: Person
    confidence: Confidence
    reason: str


@dataclass
class RequestSummary:
    """A Request with its Person and Ticket, as listed on staff boards"""

    request: Request
    person: Person | None = None
    ticket: Ticket | None = None


@dataclass
class StaffBoard:
    """Requests grouped by the stage staff act on"""

    queued: list[RequestSummary] = field(default_factory=list)
    serving: list[RequestSummary] = field(default_factory=list)
    completed: list[RequestSummary] = field(default_factory=list)


@dataclass
class DisplayBoard:
    """Public queue display: who is waiting, who is being served, who can claim"""

    waiting: list[Ticket] = field(default_factory=list)
    serving: list[Ticket] = field(default_factory=list)
    done: list[Ticket] = field(default_factory=list)
