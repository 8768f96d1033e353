"""
Pydantic schemas for the repair endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel


class RepairReportResponse(BaseModel):
    """Request numbers queued by the repair pass and those that failed."""

    repaired: list[str]
    failed: list[str]
