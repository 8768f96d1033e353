"""
Requests Router - staff processing of visitor requests.

Staff terminals read requests with their documents, produce documents and
move requests to completed, claimed or cancelled.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ticketing.engine import TicketingEngine
from ticketing.models import RequestStatus
from ticketing.roles import Actor

from ..dependencies import get_current_actor, get_engine, get_staff_actor
from ..schemas.requests import (
    ProducedCountResponse,
    RequestDetailResponse,
    RequestResponse,
    StaffBoardResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/requests", tags=["requests"])


@router.get("", response_model=list[RequestResponse])
async def list_requests(
    status: RequestStatus | None = Query(default=None),
    person_id: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    actor: Actor = Depends(get_staff_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> list[RequestResponse]:
    """List requests by status (oldest first) or for one person (newest first)."""
    if person_id is not None:
        requests = await asyncio.to_thread(engine.requests.list_for_person, person_id, limit)
    elif status is not None:
        requests = await asyncio.to_thread(engine.requests.list_by_status, status, limit)
    else:
        raise HTTPException(status_code=422, detail="Provide status or person_id")
    return [RequestResponse.from_domain(r) for r in requests]


@router.get("/board", response_model=StaffBoardResponse)
async def staff_board(
    completed_limit: int = Query(default=20, ge=1, le=200),
    actor: Actor = Depends(get_staff_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> StaffBoardResponse:
    """Queued, serving and recently completed requests for the staff dashboard."""
    board = await asyncio.to_thread(engine.requests.staff_board, 100, 100, completed_limit)
    return StaffBoardResponse.from_domain(board)


@router.get("/{request_id}", response_model=RequestDetailResponse)
async def get_request(
    request_id: str,
    actor: Actor = Depends(get_staff_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> RequestDetailResponse:
    detail = await asyncio.to_thread(engine.requests.get_detail, request_id)
    return RequestDetailResponse.from_domain(detail)


@router.post("/{request_id}/complete", response_model=RequestResponse)
async def complete_request(
    request_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> RequestResponse:
    return RequestResponse.from_domain(await asyncio.to_thread(engine.requests.complete, actor, request_id))


@router.post("/{request_id}/claim", response_model=RequestResponse)
async def claim_request(
    request_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> RequestResponse:
    """Mark a request ready to claim; every document must be produced."""
    return RequestResponse.from_domain(await asyncio.to_thread(engine.requests.mark_as_claim, actor, request_id))


@router.post("/{request_id}/cancel", response_model=RequestResponse)
async def cancel_request(
    request_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> RequestResponse:
    return RequestResponse.from_domain(await asyncio.to_thread(engine.requests.cancel, actor, request_id))


@router.post("/{request_id}/items/produce", response_model=ProducedCountResponse)
async def produce_all_items(
    request_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> ProducedCountResponse:
    """Mark every pending document of the request as produced."""
    produced = await asyncio.to_thread(engine.requests.mark_all_produced, actor, request_id)
    return ProducedCountResponse(produced=produced)
