"""
Repair Router - reconcile intakes interrupted between writes.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends

from ticketing.engine import TicketingEngine
from ticketing.roles import Actor

from ..dependencies import get_current_actor, get_engine
from ..schemas.repair import RepairReportResponse

router = APIRouter(prefix="/api/repair", tags=["repair"])


@router.post("/orphans", response_model=RepairReportResponse)
async def repair_orphans(
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> RepairReportResponse:
    """Issue missing tickets for requests stranded in pending."""
    report = await asyncio.to_thread(engine.repair.reconcile, actor)
    return RepairReportResponse(repaired=report.repaired, failed=report.failed)
