"""Request repository for data access.

Handles the requests collection. Requests are never deleted; cancellation
is a status."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ...models import Request, RequestStatus
from ...shared.dates import parse_db_datetime
from ..store import eq, lt
from .base import BaseRepository, _blank_to_none


class RequestRepository(BaseRepository):
    """Repository for Request data access"""

    collection = "requests"

    def get(self, request_id: str) -> Request | None:
        record = self._get(request_id)
        return self._map_to_request(record) if record else None

    def list_by_status(self, status: RequestStatus, limit: int, oldest_first: bool = True) -> list[Request]:
        """List requests in a status ordered by request time (FIFO by default)."""
        order = "requested_at" if oldest_first else "-requested_at"
        records = self.store.find(self.collection, [eq("status", status)], sort=[order], limit=limit)
        return [self._map_to_request(r) for r in records]

    def list_for_person(self, person_id: str, limit: int) -> list[Request]:
        records = self.store.find(self.collection, [eq("person", person_id)], sort=["-requested_at"], limit=limit)
        return [self._map_to_request(r) for r in records]

    def list_pending_before(self, cutoff: datetime, limit: int) -> list[Request]:
        """Pending requests created before cutoff, oldest first."""
        records = self.store.find(
            self.collection,
            [eq("status", RequestStatus.PENDING), lt("requested_at", cutoff)],
            sort=["requested_at"],
            limit=limit,
        )
        return [self._map_to_request(r) for r in records]

    def create(self, request: Request) -> Request:
        record = self.store.create(
            self.collection,
            {
                "person": request.person_id,
                "request_number": request.request_number,
                "total_price": request.total_price,
                "status": request.status,
                "requested_at": request.requested_at,
                "completed_at": request.completed_at,
                "cancelled_at": request.cancelled_at,
            },
        )
        return self._map_to_request(record)

    def update(self, request_id: str, fields: dict[str, Any]) -> Request:
        return self._map_to_request(self._patch(request_id, fields))

    def _map_to_request(self, record: dict[str, Any]) -> Request:
        return Request(
            id=record.get("id"),
            person_id=record.get("person", ""),
            request_number=record.get("request_number", ""),
            total_price=int(record.get("total_price") or 0),
            status=RequestStatus(record.get("status", RequestStatus.PENDING.value)),
            requested_at=parse_db_datetime(_blank_to_none(record.get("requested_at"))),
            completed_at=parse_db_datetime(_blank_to_none(record.get("completed_at"))),
            cancelled_at=parse_db_datetime(_blank_to_none(record.get("cancelled_at"))),
        )
