"""
Document Types Router - the catalog of requestable documents.

Listing active types is public (the kiosk reads it); every change requires a
superadmin.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Query

from ticketing.engine import TicketingEngine
from ticketing.models import DocumentType
from ticketing.roles import Actor

from ..dependencies import get_current_actor, get_engine
from ..schemas.document_types import (
    DocumentTypeActivation,
    DocumentTypeCreate,
    DocumentTypeResponse,
    DocumentTypeUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/document-types", tags=["document-types"])


@router.get("", response_model=list[DocumentTypeResponse])
async def list_document_types(
    include_inactive: bool = Query(default=False),
    engine: TicketingEngine = Depends(get_engine),
) -> list[DocumentTypeResponse]:
    """List the catalog. Inactive types are included only on request."""
    types = await asyncio.to_thread(engine.catalog.list, include_inactive)
    return [DocumentTypeResponse.from_domain(t) for t in types]


@router.get("/{document_type_id}", response_model=DocumentTypeResponse)
async def get_document_type(
    document_type_id: str, engine: TicketingEngine = Depends(get_engine)
) -> DocumentTypeResponse:
    return DocumentTypeResponse.from_domain(await asyncio.to_thread(engine.catalog.get, document_type_id))


@router.post("", response_model=DocumentTypeResponse, status_code=201)
async def create_document_type(
    body: DocumentTypeCreate,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> DocumentTypeResponse:
    doc_type = DocumentType(
        name=body.name,
        price=body.price,
        requires_purpose=body.requires_purpose,
        is_active=body.is_active,
        template_key=body.template_key,
    )
    created = await asyncio.to_thread(engine.catalog.create, actor, doc_type)
    return DocumentTypeResponse.from_domain(created)


@router.patch("/{document_type_id}", response_model=DocumentTypeResponse)
async def update_document_type(
    document_type_id: str,
    body: DocumentTypeUpdate,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> DocumentTypeResponse:
    changes = body.model_dump(exclude_none=True)
    updated = await asyncio.to_thread(engine.catalog.update, actor, document_type_id, changes)
    return DocumentTypeResponse.from_domain(updated)


@router.post("/{document_type_id}/active", response_model=DocumentTypeResponse)
async def set_document_type_active(
    document_type_id: str,
    body: DocumentTypeActivation,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> DocumentTypeResponse:
    updated = await asyncio.to_thread(engine.catalog.set_active, actor, document_type_id, body.is_active)
    return DocumentTypeResponse.from_domain(updated)


@router.delete("/{document_type_id}", status_code=204)
async def delete_document_type(
    document_type_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> None:
    """Delete an unused type. Types already requested must be deactivated instead."""
    await asyncio.to_thread(engine.catalog.delete, actor, document_type_id)
