"""DocumentType repository for catalog lookups."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ...models import DocumentType
from ..store import eq
from .base import BaseRepository

# Catalogs are small; this caps list queries well above any real catalog
CATALOG_LIMIT = 200


class DocumentTypeRepository(BaseRepository):
    """Repository for DocumentType data access"""

    collection = "document_types"

    def get(self, document_type_id: str) -> DocumentType | None:
        record = self._get(document_type_id)
        return self._map_to_document_type(record) if record else None

    def get_many(self, document_type_ids: Iterable[str]) -> dict[str, DocumentType]:
        """Fetch several types by id. Missing ids are absent from the result."""
        found: dict[str, DocumentType] = {}
        for type_id in dict.fromkeys(document_type_ids):
            doc_type = self.get(type_id)
            if doc_type is not None:
                found[type_id] = doc_type
        return found

    def get_by_name(self, name: str) -> DocumentType | None:
        record = self.store.first(self.collection, [eq("name", name)])
        return self._map_to_document_type(record) if record else None

    def list(self, include_inactive: bool = False) -> list[DocumentType]:
        conditions = [] if include_inactive else [eq("is_active", True)]
        records = self.store.find(self.collection, conditions, sort=["name"], limit=CATALOG_LIMIT)
        return [self._map_to_document_type(r) for r in records]

    def create(self, document_type: DocumentType) -> DocumentType:
        record = self.store.create(
            self.collection,
            {
                "name": document_type.name,
                "template_key": document_type.template_key,
                "price": document_type.price,
                "requires_purpose": document_type.requires_purpose,
                "is_active": document_type.is_active,
            },
        )
        return self._map_to_document_type(record)

    def update(self, document_type_id: str, fields: dict[str, Any]) -> DocumentType:
        return self._map_to_document_type(self._patch(document_type_id, fields))

    def delete(self, document_type_id: str) -> None:
        self.store.delete(self.collection, document_type_id)

    def _map_to_document_type(self, record: dict[str, Any]) -> DocumentType:
        return DocumentType(
            id=record.get("id"),
            name=record.get("name", ""),
            template_key=record.get("template_key", "") or "",
            price=int(record.get("price") or 0),
            requires_purpose=bool(record.get("requires_purpose", False)),
            is_active=bool(record.get("is_active", True)),
        )
