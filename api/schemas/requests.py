"""
Pydantic schemas for request and line item endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from ticketing.models import (
    LineItem,
    LineItemDetail,
    LineItemStatus,
    Request,
    RequestDetail,
    RequestStatus,
    RequestSummary,
    StaffBoard,
)

from .persons import PersonResponse
from .queue import TicketResponse


class RequestResponse(BaseModel):
    """Response model for a visitor request. Prices are in cents."""

    id: str
    person_id: str
    request_number: str
    total_price: int
    status: RequestStatus
    requested_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def from_domain(cls, request: Request) -> RequestResponse:
        return cls(
            id=request.id or "",
            person_id=request.person_id,
            request_number=request.request_number,
            total_price=request.total_price,
            status=request.status,
            requested_at=request.requested_at,
            completed_at=request.completed_at,
            cancelled_at=request.cancelled_at,
        )


class LineItemResponse(BaseModel):
    id: str
    request_id: str
    document_type_id: str
    document_type_name: str | None = None
    price: int | None = None
    purpose: str
    status: LineItemStatus
    created_at: datetime | None = None
    produced_at: datetime | None = None

    @classmethod
    def from_domain(cls, item: LineItem, detail: LineItemDetail | None = None) -> LineItemResponse:
        doc_type = detail.document_type if detail else None
        return cls(
            id=item.id or "",
            request_id=item.request_id,
            document_type_id=item.document_type_id,
            document_type_name=doc_type.name if doc_type else None,
            price=doc_type.price if doc_type else None,
            purpose=item.purpose,
            status=item.status,
            created_at=item.created_at,
            produced_at=item.produced_at,
        )


class RequestDetailResponse(BaseModel):
    """Everything a staff terminal needs to process one request."""

    request: RequestResponse
    person: PersonResponse | None = None
    items: list[LineItemResponse]
    ticket: TicketResponse | None = None
    all_produced: bool

    @classmethod
    def from_domain(cls, detail: RequestDetail) -> RequestDetailResponse:
        return cls(
            request=RequestResponse.from_domain(detail.request),
            person=PersonResponse.from_domain(detail.person) if detail.person else None,
            items=[LineItemResponse.from_domain(d.item, d) for d in detail.items],
            ticket=TicketResponse.from_domain(detail.ticket) if detail.ticket else None,
            all_produced=detail.all_produced,
        )


class RequestSummaryResponse(BaseModel):
    request: RequestResponse
    person_name: str | None = None
    ticket_number: str | None = None
    counter: int | None = None

    @classmethod
    def from_domain(cls, summary: RequestSummary) -> RequestSummaryResponse:
        return cls(
            request=RequestResponse.from_domain(summary.request),
            person_name=summary.person.full_name if summary.person else None,
            ticket_number=summary.ticket.ticket_number if summary.ticket else None,
            counter=summary.ticket.counter if summary.ticket else None,
        )


class StaffBoardResponse(BaseModel):
    queued: list[RequestSummaryResponse]
    serving: list[RequestSummaryResponse]
    completed: list[RequestSummaryResponse]

    @classmethod
    def from_domain(cls, board: StaffBoard) -> StaffBoardResponse:
        return cls(
            queued=[RequestSummaryResponse.from_domain(s) for s in board.queued],
            serving=[RequestSummaryResponse.from_domain(s) for s in board.serving],
            completed=[RequestSummaryResponse.from_domain(s) for s in board.completed],
        )


class PurposeUpdate(BaseModel):
    purpose: str


class ProducedCountResponse(BaseModel):
    """Number of documents newly marked as produced."""

    produced: int
