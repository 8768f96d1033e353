"""
Persons Router - the person registry.

Staff register and edit persons and review probable duplicates; admins
approve or reject records created at the kiosk.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends, Query

from ticketing.engine import TicketingEngine
from ticketing.roles import Actor

from ..dependencies import get_current_actor, get_engine, get_staff_actor
from ..schemas.persons import (
    ApproveRequest,
    DuplicateMatchResponse,
    PersonCreate,
    PersonResponse,
    PersonUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/persons", tags=["persons"])


@router.get("/duplicates", response_model=list[DuplicateMatchResponse])
async def find_duplicates(
    first_name: str = Query(min_length=1),
    last_name: str = Query(min_length=1),
    birthdate: date = Query(),
    exclude_id: str | None = Query(default=None),
    actor: Actor = Depends(get_staff_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> list[DuplicateMatchResponse]:
    """Probable duplicates of the given name and birthdate, most confident first."""
    matches = await asyncio.to_thread(engine.persons.find_duplicates, first_name, last_name, birthdate, exclude_id)
    return [DuplicateMatchResponse.from_domain(m) for m in matches]


@router.get("/search", response_model=list[PersonResponse])
async def search_persons(
    last_name: str = Query(min_length=1),
    limit: int = Query(default=20, ge=1, le=100),
    actor: Actor = Depends(get_staff_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> list[PersonResponse]:
    persons = await asyncio.to_thread(engine.persons.search, last_name, limit)
    return [PersonResponse.from_domain(p) for p in persons]


@router.get("/registry/{registry_number}", response_model=PersonResponse)
async def get_by_registry_number(
    registry_number: str,
    actor: Actor = Depends(get_staff_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> PersonResponse:
    person = await asyncio.to_thread(engine.persons.get_by_registry_number, registry_number)
    return PersonResponse.from_domain(person)


@router.get("/{person_id}", response_model=PersonResponse)
async def get_person(
    person_id: str,
    actor: Actor = Depends(get_staff_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> PersonResponse:
    return PersonResponse.from_domain(await asyncio.to_thread(engine.persons.get, person_id))


@router.get("/{person_id}/duplicates", response_model=list[DuplicateMatchResponse])
async def review_duplicates(
    person_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> list[DuplicateMatchResponse]:
    """Probable duplicates of a stored person, excluding the person itself."""
    matches = await asyncio.to_thread(engine.persons.review_duplicates, actor, person_id)
    return [DuplicateMatchResponse.from_domain(m) for m in matches]


@router.post("", response_model=PersonResponse, status_code=201)
async def register_person(
    body: PersonCreate,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> PersonResponse:
    person = await asyncio.to_thread(engine.persons.register, actor, body.to_domain())
    return PersonResponse.from_domain(person)


@router.patch("/{person_id}", response_model=PersonResponse)
async def update_person(
    person_id: str,
    body: PersonUpdate,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> PersonResponse:
    changes = body.model_dump(exclude_none=True)
    person = await asyncio.to_thread(engine.persons.update, actor, person_id, changes)
    return PersonResponse.from_domain(person)


@router.post("/{person_id}/approve", response_model=PersonResponse)
async def approve_person(
    person_id: str,
    body: ApproveRequest | None = None,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> PersonResponse:
    """Approve a kiosk registration, assigning its registry number."""
    registry_number = body.registry_number if body else None
    person = await asyncio.to_thread(engine.persons.approve_provisional, actor, person_id, registry_number)
    return PersonResponse.from_domain(person)


@router.post("/{person_id}/reject", status_code=204)
async def reject_person(
    person_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> None:
    """Reject a kiosk registration, deleting the record."""
    await asyncio.to_thread(engine.persons.reject_provisional, actor, person_id)


@router.delete("/{person_id}", status_code=204)
async def delete_person(
    person_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: TicketingEngine = Depends(get_engine),
) -> None:
    await asyncio.to_thread(engine.persons.remove, actor, person_id)
