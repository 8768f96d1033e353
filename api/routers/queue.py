"""
Queue Router - ticket flow at the service counters.

The display board is public; everything else is for staff.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ticketing.engine import TicketingEngine
from ticketing.models import TicketStatus
from ticketing.roles import Actor

from ..dependencies import get_current_actor, get_engine, get_staff_actor
from ..schemas.queue import (
    DisplayBoardResponse,
    ProcessNextRequest,
    TicketResponse,
    TicketUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/queue", tags=["queue"])


@router.get("/display", response_model=DisplayBoardResponse)
async def display_board(
    done_limit: int = Query(default=10, ge=1, le=50),
    engine: TicketingEngine = Depends(get_engine),
) -> DisplayBoardResponse:
    """Public queue display: waiting, now serving and ready to claim."""
    board = await asyncio.to_thread(engine.queue.display_board, done_limit)
    return DisplayBoardResponse.from_domain(board)


@router.get("", response_model=list[TicketResponse])
async def list_tickets(
    status: TicketStatus = Query(default=TicketStatus.WAITING),
    counter: int | None = Query(default=None, ge=1),
    limit: int = Query(default=100, ge=1, le=500),
    actor: Actor = Depends(get_staff_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> list[TicketResponse]:
    tickets = await asyncio.to_thread(engine.queue.list_by_status, status, counter, limit)
    return [TicketResponse.from_domain(t) for t in tickets]


@router.get("/number/{ticket_number}", response_model=TicketResponse)
async def get_ticket_by_number(
    ticket_number: str,
    actor: Actor = Depends(get_staff_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> TicketResponse:
    """Look up one of today's tickets by its number (e.g. Q-007)."""
    ticket = await asyncio.to_thread(engine.queue.get_by_number, ticket_number)
    if ticket is None:
        raise HTTPException(status_code=404, detail=f"Ticket {ticket_number} not found today")
    return TicketResponse.from_domain(ticket)


@router.post("/next", response_model=TicketResponse)
async def process_next(
    body: ProcessNextRequest | None = None,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> TicketResponse:
    """Call the oldest waiting ticket to a counter."""
    counter = body.counter if body else None
    ticket = await asyncio.to_thread(engine.queue.process_next, actor, counter)
    return TicketResponse.from_domain(ticket)


@router.patch("/{ticket_id}", response_model=TicketResponse)
async def update_ticket(
    ticket_id: str,
    body: TicketUpdate,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> TicketResponse:
    """Manually correct a ticket's status and/or counter."""
    if body.status is None and body.counter is None:
        raise HTTPException(status_code=422, detail="Provide status or counter")
    if body.status is None:
        assert body.counter is not None
        ticket = await asyncio.to_thread(engine.queue.assign_counter, actor, ticket_id, body.counter)
    else:
        ticket = await asyncio.to_thread(engine.queue.update_status, actor, ticket_id, body.status, body.counter)
    return TicketResponse.from_domain(ticket)


@router.post("/{ticket_id}/done", response_model=TicketResponse)
async def mark_done(
    ticket_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> TicketResponse:
    """Close the ticket and complete its request."""
    return TicketResponse.from_domain(await asyncio.to_thread(engine.queue.mark_done, actor, ticket_id))
