"""
Kiosk Router - public self-service intake.

A visitor picks documents, identifies themselves (or registers as a guest)
and receives a printed ticket. No authentication is required.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends

from ticketing.engine import TicketingEngine

from ..dependencies import get_engine
from ..schemas.kiosk import IntakeReceiptResponse, KioskSubmission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/kiosk", tags=["kiosk"])


@router.post("/submit", response_model=IntakeReceiptResponse, status_code=201)
async def submit(body: KioskSubmission, engine: TicketingEngine = Depends(get_engine)) -> IntakeReceiptResponse:
    """Create a queued request and its ticket from a kiosk submission."""
    receipt = await asyncio.to_thread(engine.intake.submit, body.to_domain())
    return IntakeReceiptResponse.from_domain(receipt)
