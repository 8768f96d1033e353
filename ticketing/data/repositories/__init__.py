"""Repositories over the record store, one per collection."""

from __future__ import annotations

from .document_type_repository import DocumentTypeRepository
from .line_item_repository import LineItemRepository
from .person_repository import PersonRepository
from .request_repository import RequestRepository
from .reservation_repository import ReservationRepository
from .ticket_repository import TicketRepository

__all__ = [
    "DocumentTypeRepository",
    "LineItemRepository",
    "PersonRepository",
    "RequestRepository",
    "ReservationRepository",
    "TicketRepository",
]
