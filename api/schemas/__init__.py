"""
Pydantic schemas for the counter API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .document_types import (
    DocumentTypeActivation,
    DocumentTypeCreate,
    DocumentTypeResponse,
    DocumentTypeUpdate,
)
from .kiosk import GuestBody, IntakeReceiptResponse, ItemRequestBody, KioskSubmission
from .persons import (
    ApproveRequest,
    DuplicateMatchResponse,
    PersonCreate,
    PersonResponse,
    PersonUpdate,
)
from .queue import (
    DisplayBoardResponse,
    DisplayTicket,
    ProcessNextRequest,
    TicketResponse,
    TicketUpdate,
)
from .repair import RepairReportResponse
from .requests import (
    LineItemResponse,
    ProducedCountResponse,
    PurposeUpdate,
    RequestDetailResponse,
    RequestResponse,
    RequestSummaryResponse,
    StaffBoardResponse,
)

__all__ = [
    # Document types
    "DocumentTypeActivation",
    "DocumentTypeCreate",
    "DocumentTypeResponse",
    "DocumentTypeUpdate",
    # Kiosk
    "GuestBody",
    "IntakeReceiptResponse",
    "ItemRequestBody",
    "KioskSubmission",
    # Persons
    "ApproveRequest",
    "DuplicateMatchResponse",
    "PersonCreate",
    "PersonResponse",
    "PersonUpdate",
    # Queue
    "DisplayBoardResponse",
    "DisplayTicket",
    "ProcessNextRequest",
    "TicketResponse",
    "TicketUpdate",
    # Repair
    "RepairReportResponse",
    # Requests
    "LineItemResponse",
    "ProducedCountResponse",
    "PurposeUpdate",
    "RequestDetailResponse",
    "RequestResponse",
    "RequestSummaryResponse",
    "StaffBoardResponse",
]
