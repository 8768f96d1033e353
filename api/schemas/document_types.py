"""
Pydantic schemas for document type endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ticketing.models import DocumentType


class DocumentTypeResponse(BaseModel):
    """Response model for a catalog entry. Prices are in cents."""

    id: str
    name: str
    template_key: str
    price: int
    requires_purpose: bool
    is_active: bool

    @classmethod
    def from_domain(cls, doc_type: DocumentType) -> DocumentTypeResponse:
        return cls(
            id=doc_type.id or "",
            name=doc_type.name,
            template_key=doc_type.template_key,
            price=doc_type.price,
            requires_purpose=doc_type.requires_purpose,
            is_active=doc_type.is_active,
        )


class DocumentTypeCreate(BaseModel):
    """Request model for creating a document type."""

    name: str = Field(min_length=1)
    price: int = Field(ge=0)
    requires_purpose: bool = False
    is_active: bool = True
    template_key: str = ""


class DocumentTypeUpdate(BaseModel):
    """Request model for editing a document type. Omitted fields are unchanged."""

    name: str | None = Field(default=None, min_length=1)
    price: int | None = Field(default=None, ge=0)
    requires_purpose: bool | None = None
    is_active: bool | None = None
    template_key: str | None = None


class DocumentTypeActivation(BaseModel):
    is_active: bool
