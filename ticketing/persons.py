"""Person registry: registration, edits and review of kiosk-created records."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from .config import EngineConfig
from .data.repositories.person_repository import PersonRepository
from .data.repositories.request_repository import RequestRepository
from .duplicates import DuplicateResolver
from .errors import ConflictError, DuplicateKeyError, NotFoundError, ValidationError
from .models import DuplicateMatch, Person, PersonStatus
from .roles import Actor, Role, require_role
from .sequence import SequenceAllocator, Series
from .shared.dates import utc_now
from .transitions import ensure_transition

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {"first_name", "middle_name", "last_name", "suffix", "birthdate", "location", "status"}
)


def _clean(person: Person, today: date) -> Person:
    """Trim name parts and check required fields."""
    person = replace(
        person,
        first_name=person.first_name.strip(),
        middle_name=person.middle_name.strip(),
        last_name=person.last_name.strip(),
        suffix=(person.suffix or "").strip() or None,
        location=person.location.strip(),
    )
    if not person.first_name or not person.last_name:
        raise ValidationError("First and last name are required")
    if person.birthdate > today:
        raise ValidationError("Birthdate cannot be in the future", birthdate=person.birthdate.isoformat())
    return person


class PersonRegistry:
    """Manages Person records and their registry numbers."""

    def __init__(
        self,
        persons: PersonRepository,
        requests: RequestRepository,
        resolver: DuplicateResolver,
        sequence: SequenceAllocator,
        config: EngineConfig,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.persons = persons
        self.requests = requests
        self.resolver = resolver
        self.sequence = sequence
        self.config = config
        self.clock = clock

    def _today(self) -> date:
        return self.clock().astimezone(self.config.zone).date()

    def get(self, person_id: str) -> Person:
        person = self.persons.get(person_id)
        if person is None:
            raise NotFoundError(f"Person {person_id} not found", person_id=person_id)
        return person

    def get_by_registry_number(self, registry_number: str) -> Person:
        person = self.persons.get_by_registry_number(registry_number)
        if person is None:
            raise NotFoundError(f"No person with registry number {registry_number}", registry_number=registry_number)
        return person

    def search(self, last_name: str, limit: int = 20) -> list[Person]:
        """Persons whose last name starts with the given text."""
        term = " ".join(last_name.strip().lower().split())
        if not term:
            return []
        return self.persons.find_by_last_name_prefix(term, limit)

    def _claim_registry_number(self, registry_number: str | None, now: datetime) -> str:
        if registry_number:
            if self.persons.get_by_registry_number(registry_number) is not None:
                raise ConflictError(
                    f"Registry number {registry_number} already exists", registry_number=registry_number
                )
            return registry_number
        return self.sequence.reserve(Series.REGISTRY, now)

    def _insert(self, person: Person) -> Person:
        try:
            return self.persons.create(person)
        except DuplicateKeyError as e:
            raise ConflictError(
                f"Registry number {person.registry_number} already exists", registry_number=person.registry_number
            ) from e

    def register(self, actor: Actor | None, person: Person) -> Person:
        """Register a verified person, allocating a registry number unless one is given."""
        require_role(actor, Role.STAFF, "register persons")
        now = self.clock()
        person = _clean(person, self._today())
        if person.status is PersonStatus.PROVISIONAL:
            raise ValidationError("Staff registrations cannot be provisional")

        registry_number = self._claim_registry_number(person.registry_number, now)
        created = self._insert(replace(person, registry_number=registry_number, created_at=now, updated_at=now))
        logger.info(f"Registered {created.full_name} as {registry_number}")
        return created

    def register_provisional(self, person: Person) -> Person:
        """Record a walk-in from the kiosk. No registry number, no duplicate check."""
        now = self.clock()
        person = _clean(person, self._today())
        created = self._insert(
            replace(
                person,
                status=PersonStatus.PROVISIONAL,
                registry_number=None,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(f"Registered provisional person {created.id}")
        return created

    def update(self, actor: Actor | None, person_id: str, changes: dict[str, Any]) -> Person:
        """Edit name parts, birthdate, location or status.

        Status changes follow the person transition table; provisional
        records change status only through approve/reject.
        """
        require_role(actor, Role.STAFF, "edit persons")
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        person = self.get(person_id)
        merged = _clean(replace(person, **changes), self._today())

        if merged.status is not person.status:
            if PersonStatus.PROVISIONAL in (person.status, merged.status):
                raise ValidationError("Provisional records change status only through approval or rejection")
            ensure_transition(person.status, merged.status)

        fields = {name: getattr(merged, name) for name in changes}
        fields["updated_at"] = self.clock()
        if "suffix" in fields:
            fields["suffix"] = fields["suffix"] or ""
        return self.persons.update(person_id, fields)

    def _get_provisional(self, person_id: str) -> Person:
        person = self.get(person_id)
        if not person.is_provisional:
            raise ValidationError(f"{person.full_name} is not pending approval", person_id=person_id)
        return person

    def approve_provisional(self, actor: Actor | None, person_id: str, registry_number: str | None = None) -> Person:
        """Approve a kiosk registration: assign a registry number and activate it."""
        require_role(actor, Role.ADMIN, "approve pending persons")
        person = self._get_provisional(person_id)
        ensure_transition(person.status, PersonStatus.ACTIVE)

        now = self.clock()
        number = self._claim_registry_number(registry_number, now)
        try:
            approved = self.persons.update(
                person_id, {"status": PersonStatus.ACTIVE, "registry_number": number, "updated_at": now}
            )
        except DuplicateKeyError as e:
            raise ConflictError(f"Registry number {number} already exists", registry_number=number) from e
        logger.info(f"Approved provisional person {person_id} as {number}")
        return approved

    def reject_provisional(self, actor: Actor | None, person_id: str) -> None:
        """Reject a kiosk registration, deleting the record."""
        require_role(actor, Role.ADMIN, "reject pending persons")
        self._get_provisional(person_id)
        self.persons.delete(person_id)
        logger.info(f"Rejected provisional person {person_id}")

    def remove(self, actor: Actor | None, person_id: str) -> None:
        """Delete a person that no Request refers to."""
        require_role(actor, Role.ADMIN, "delete persons")
        person = self.get(person_id)
        if self.requests.list_for_person(person_id, 1):
            raise ConflictError(f"{person.full_name} has requests on record and cannot be deleted", person_id=person_id)
        self.persons.delete(person_id)
        logger.info(f"Deleted person {person_id}")

    def review_duplicates(self, actor: Actor | None, person_id: str) -> list[DuplicateMatch]:
        """Probable duplicates of a stored person, excluding the person itself."""
        require_role(actor, Role.STAFF, "review duplicates")
        person = self.get(person_id)
        return self.resolver.find_duplicates(
            person.first_name, person.last_name, person.birthdate, exclude_id=person_id
        )

    def find_duplicates(
        self, first_name: str, last_name: str, birthdate: date, exclude_id: str | None = None
    ) -> list[DuplicateMatch]:
        return self.resolver.find_duplicates(first_name, last_name, birthdate, exclude_id=exclude_id)
