"""Ticket repository for the tickets collection.

The collection carries a unique index on ``request`` so at most one Ticket
exists per Request; lookups by request use that index instead of scanning."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ...models import Ticket, TicketStatus
from ...shared.dates import parse_db_datetime
from ..store import eq, gte, lt
from .base import BaseRepository, _blank_to_none


class TicketRepository(BaseRepository):
    """Repository for Ticket data access"""

    collection = "tickets"

    def get(self, ticket_id: str) -> Ticket | None:
        record = self._get(ticket_id)
        return self._map_to_ticket(record) if record else None

    def get_by_request(self, request_id: str) -> Ticket | None:
        record = self.store.first(self.collection, [eq("request", request_id)])
        return self._map_to_ticket(record) if record else None

    def get_by_number(self, ticket_number: str, day_start: datetime, day_end: datetime) -> Ticket | None:
        """Ticket numbers repeat daily, so lookups are scoped to one day."""
        record = self.store.first(
            self.collection,
            [eq("ticket_number", ticket_number), gte("created_at", day_start), lt("created_at", day_end)],
        )
        return self._map_to_ticket(record) if record else None

    def oldest_waiting(self) -> Ticket | None:
        record = self.store.first(
            self.collection, [eq("status", TicketStatus.WAITING)], sort=["created_at", "ticket_number"]
        )
        return self._map_to_ticket(record) if record else None

    def list_by_status(
        self,
        status: TicketStatus,
        limit: int,
        counter: int | None = None,
        oldest_first: bool = True,
    ) -> list[Ticket]:
        conditions = [eq("status", status)]
        if counter is not None:
            conditions.append(eq("counter", counter))
        order = "created_at" if oldest_first else "-created_at"
        records = self.store.find(self.collection, conditions, sort=[order], limit=limit)
        return [self._map_to_ticket(r) for r in records]

    def create(self, ticket: Ticket) -> Ticket:
        record = self.store.create(
            self.collection,
            {
                "request": ticket.request_id,
                "ticket_number": ticket.ticket_number,
                "service_type": ticket.service_type,
                "status": ticket.status,
                "counter": ticket.counter or 0,
                "served_by": ticket.served_by or "",
                "created_at": ticket.created_at,
                "started_at": ticket.started_at,
                "completed_at": ticket.completed_at,
            },
        )
        return self._map_to_ticket(record)

    def update(self, ticket_id: str, fields: dict[str, Any]) -> Ticket:
        if "counter" in fields and fields["counter"] is None:
            fields = {**fields, "counter": 0}
        return self._map_to_ticket(self._patch(ticket_id, fields))

    def _map_to_ticket(self, record: dict[str, Any]) -> Ticket:
        counter = record.get("counter")
        return Ticket(
            id=record.get("id"),
            request_id=record.get("request", ""),
            ticket_number=record.get("ticket_number", ""),
            service_type=record.get("service_type", "") or "certificate",
            status=TicketStatus(record.get("status", TicketStatus.WAITING.value)),
            counter=int(counter) if counter else None,
            served_by=_blank_to_none(record.get("served_by")),
            created_at=parse_db_datetime(_blank_to_none(record.get("created_at"))),
            started_at=parse_db_datetime(_blank_to_none(record.get("started_at"))),
            completed_at=parse_db_datetime(_blank_to_none(record.get("completed_at"))),
        )
