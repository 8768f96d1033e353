"""
Items Router - per-document actions on a request's line items.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends

from ticketing.engine import TicketingEngine
from ticketing.roles import Actor

from ..dependencies import get_current_actor, get_engine
from ..schemas.requests import LineItemResponse, PurposeUpdate

router = APIRouter(prefix="/api/items", tags=["items"])


@router.post("/{line_item_id}/produce", response_model=LineItemResponse)
async def mark_produced(
    line_item_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> LineItemResponse:
    """Mark one document as produced (idempotent)."""
    item = await asyncio.to_thread(engine.requests.mark_produced, actor, line_item_id)
    return LineItemResponse.from_domain(item)


@router.patch("/{line_item_id}", response_model=LineItemResponse)
async def update_purpose(
    line_item_id: str,
    body: PurposeUpdate,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> LineItemResponse:
    item = await asyncio.to_thread(engine.requests.update_purpose, actor, line_item_id, body.purpose)
    return LineItemResponse.from_domain(item)
