"""
Pydantic schemas for queue endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ticketing.models import DisplayBoard, Ticket, TicketStatus


class TicketResponse(BaseModel):
    """Response model for a queue ticket."""

    id: str
    request_id: str
    ticket_number: str
    service_type: str
    status: TicketStatus
    counter: int | None = None
    served_by: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_domain(cls, ticket: Ticket) -> TicketResponse:
        return cls(
            id=ticket.id or "",
            request_id=ticket.request_id,
            ticket_number=ticket.ticket_number,
            service_type=ticket.service_type,
            status=ticket.status,
            counter=ticket.counter,
            served_by=ticket.served_by,
            created_at=ticket.created_at,
            started_at=ticket.started_at,
            completed_at=ticket.completed_at,
        )


class ProcessNextRequest(BaseModel):
    """Request body for serving the next ticket."""

    counter: int | None = Field(default=None, ge=1)


class TicketUpdate(BaseModel):
    """Manual correction: a new status, a counter, or both."""

    status: TicketStatus | None = None
    counter: int | None = Field(default=None, ge=1)


class DisplayTicket(BaseModel):
    """What the public board shows: no request or staff details."""

    ticket_number: str
    status: TicketStatus
    counter: int | None = None


class DisplayBoardResponse(BaseModel):
    waiting: list[DisplayTicket]
    serving: list[DisplayTicket]
    done: list[DisplayTicket]

    @classmethod
    def from_domain(cls, board: DisplayBoard) -> DisplayBoardResponse:
        def entries(tickets: list[Ticket]) -> list[DisplayTicket]:
            return [DisplayTicket(ticket_number=t.ticket_number, status=t.status, counter=t.counter) for t in tickets]

        return cls(waiting=entries(board.waiting), serving=entries(board.serving), done=entries(board.done))
