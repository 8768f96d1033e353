"""Document type catalog management."""

from __future__ import annotations

import logging
from typing import Any

from .data.repositories.document_type_repository import DocumentTypeRepository
from .data.repositories.line_item_repository import LineItemRepository
from .errors import ConflictError, DuplicateKeyError, NotFoundError, ValidationError
from .models import DocumentType
from .roles import Actor, Role, require_role

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "template_key", "price", "requires_purpose", "is_active"})


def _validate(name: str, price: int) -> None:
    if not name.strip():
        raise ValidationError("Document type name is required")
    if price < 0:
        raise ValidationError("Price cannot be negative", price=price)


class DocumentCatalog:
    """Lists and maintains the DocumentTypes visitors can request."""

    def __init__(self, document_types: DocumentTypeRepository, items: LineItemRepository):
        self.document_types = document_types
        self.items = items

    def list(self, include_inactive: bool = False) -> list[DocumentType]:
        return self.document_types.list(include_inactive=include_inactive)

    def get(self, document_type_id: str) -> DocumentType:
        doc_type = self.document_types.get(document_type_id)
        if doc_type is None:
            raise NotFoundError(f"Document type {document_type_id} not found", document_type_id=document_type_id)
        return doc_type

    def _ensure_name_free(self, name: str, own_id: str | None = None) -> None:
        existing = self.document_types.get_by_name(name)
        if existing is not None and existing.id != own_id:
            raise ConflictError(f'Document type "{name}" already exists', name=name)

    def create(self, actor: Actor | None, document_type: DocumentType) -> DocumentType:
        require_role(actor, Role.SUPERADMIN, "create document types")
        name = document_type.name.strip()
        _validate(name, document_type.price)
        self._ensure_name_free(name)

        try:
            created = self.document_types.create(
                DocumentType(
                    name=name,
                    price=document_type.price,
                    requires_purpose=document_type.requires_purpose,
                    is_active=document_type.is_active,
                    template_key=document_type.template_key.strip(),
                )
            )
        except DuplicateKeyError as e:
            raise ConflictError(f'Document type "{name}" already exists', name=name) from e
        logger.info(f"Created document type {name} ({created.price})")
        return created

    def update(self, actor: Actor | None, document_type_id: str, changes: dict[str, Any]) -> DocumentType:
        require_role(actor, Role.SUPERADMIN, "update document types")
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        current = self.get(document_type_id)
        fields = dict(changes)
        if "name" in fields:
            fields["name"] = fields["name"].strip()
        _validate(fields.get("name", current.name), fields.get("price", current.price))
        if "name" in fields and fields["name"] != current.name:
            self._ensure_name_free(fields["name"], own_id=document_type_id)

        try:
            return self.document_types.update(document_type_id, fields)
        except DuplicateKeyError as e:
            raise ConflictError(f'Document type "{fields.get("name")}" already exists') from e

    def set_active(self, actor: Actor | None, document_type_id: str, active: bool) -> DocumentType:
        require_role(actor, Role.SUPERADMIN, "activate or deactivate document types")
        self.get(document_type_id)
        updated = self.document_types.update(document_type_id, {"is_active": active})
        logger.info(f"Document type {updated.name} {'activated' if active else 'deactivated'}")
        return updated

    def delete(self, actor: Actor | None, document_type_id: str) -> None:
        """Delete an unused type. Types that appear on any request must be deactivated instead."""
        require_role(actor, Role.SUPERADMIN, "delete document types")
        doc_type = self.get(document_type_id)
        if self.items.is_document_type_used(document_type_id):
            raise ConflictError(
                f"{doc_type.name} has been requested before and cannot be deleted; deactivate it instead",
                document_type_id=document_type_id,
            )
        self.document_types.delete(document_type_id)
        logger.info(f"Deleted document type {doc_type.name}")
