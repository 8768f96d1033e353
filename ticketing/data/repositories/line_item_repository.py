"""LineItem repository for the request_items collection."""

from __future__ import annotations

from typing import Any

from ...models import LineItem, LineItemStatus
from ...shared.dates import parse_db_datetime
from ..store import eq
from .base import BaseRepository, _blank_to_none


class LineItemRepository(BaseRepository):
    """Repository for LineItem data access"""

    collection = "request_items"

    def get(self, item_id: str) -> LineItem | None:
        record = self._get(item_id)
        return self._map_to_item(record) if record else None

    def list_for_request(self, request_id: str, limit: int, status: LineItemStatus | None = None) -> list[LineItem]:
        """Items of a request in creation order, optionally filtered by status."""
        conditions = [eq("request", request_id)]
        if status is not None:
            conditions.append(eq("status", status))
        records = self.store.find(self.collection, conditions, sort=["created_at"], limit=limit)
        return [self._map_to_item(r) for r in records]

    def is_document_type_used(self, document_type_id: str) -> bool:
        return self.store.first(self.collection, [eq("document_type", document_type_id)]) is not None

    def create(self, item: LineItem) -> LineItem:
        record = self.store.create(
            self.collection,
            {
                "request": item.request_id,
                "document_type": item.document_type_id,
                "purpose": item.purpose,
                "status": item.status,
                "created_at": item.created_at,
                "produced_at": item.produced_at,
            },
        )
        return self._map_to_item(record)

    def update(self, item_id: str, fields: dict[str, Any]) -> LineItem:
        return self._map_to_item(self._patch(item_id, fields))

    def _map_to_item(self, record: dict[str, Any]) -> LineItem:
        return LineItem(
            id=record.get("id"),
            request_id=record.get("request", ""),
            document_type_id=record.get("document_type", ""),
            purpose=record.get("purpose", "") or "",
            status=LineItemStatus(record.get("status", LineItemStatus.PENDING.value)),
            created_at=parse_db_datetime(_blank_to_none(record.get("created_at"))),
            produced_at=parse_db_datetime(_blank_to_none(record.get("produced_at"))),
        )
