"""Person repository for data access.

Handles all store operations for the persons collection. Each record keeps a
``last_name_key`` (normalized last name) so duplicate checks can range-scan
on a consistent case."""

from __future__ import annotations

import logging
from typing import Any

from ...models import Person, PersonStatus
from ...shared.dates import parse_db_date, parse_db_datetime
from ...shared.name_utils import normalize_name
from ..store import eq, gte, lt
from .base import BaseRepository, _blank_to_none

logger = logging.getLogger(__name__)

# Upper bound for prefix range scans on text keys
MAX_CHAR = "\uffff"


class PersonRepository(BaseRepository):
    """Repository for Person data access"""

    collection = "persons"

    def get(self, person_id: str) -> Person | None:
        record = self._get(person_id)
        return self._map_to_person(record) if record else None

    def get_by_registry_number(self, registry_number: str) -> Person | None:
        record = self.store.first(self.collection, [eq("registry_number", registry_number)])
        return self._map_to_person(record) if record else None

    def find_by_last_name_prefix(self, term: str, limit: int) -> list[Person]:
        """Find persons whose normalized last name starts with term.

        Args:
            term: Normalized (lower-case, trimmed) last name prefix
            limit: Maximum number of candidates to return
        """
        records = self.store.find(
            self.collection,
            [gte("last_name_key", term), lt("last_name_key", term + MAX_CHAR)],
            sort=["last_name_key", "first_name"],
            limit=limit,
        )
        return [self._map_to_person(r) for r in records]

    def create(self, person: Person) -> Person:
        record = self.store.create(self.collection, self._map_to_db(person))
        return self._map_to_person(record)

    def update(self, person_id: str, fields: dict[str, Any]) -> Person:
        """Patch a person. Name changes keep last_name_key in sync."""
        if "last_name" in fields:
            fields = {**fields, "last_name_key": normalize_name(fields["last_name"])}
        return self._map_to_person(self._patch(person_id, fields))

    def delete(self, person_id: str) -> None:
        self.store.delete(self.collection, person_id)

    def _map_to_db(self, person: Person) -> dict[str, Any]:
        return {
            "registry_number": person.registry_number or "",
            "first_name": person.first_name,
            "middle_name": person.middle_name,
            "last_name": person.last_name,
            "last_name_key": normalize_name(person.last_name),
            "suffix": person.suffix or "",
            "birthdate": person.birthdate,
            "location": person.location,
            "status": person.status,
            "created_at": person.created_at,
            "updated_at": person.updated_at,
        }

    def _map_to_person(self, record: dict[str, Any]) -> Person:
        birthdate = parse_db_date(record.get("birthdate"))
        if birthdate is None:
            logger.warning(f"Person {record.get('id')} has an unreadable birthdate: {record.get('birthdate')!r}")
            raise ValueError(f"Person {record.get('id')} has no valid birthdate")
        return Person(
            id=record.get("id"),
            registry_number=_blank_to_none(record.get("registry_number")),
            first_name=record.get("first_name", ""),
            middle_name=record.get("middle_name", "") or "",
            last_name=record.get("last_name", ""),
            suffix=_blank_to_none(record.get("suffix")),
            birthdate=birthdate,
            location=record.get("location", "") or "",
            status=PersonStatus(record.get("status", PersonStatus.ACTIVE.value)),
            created_at=parse_db_datetime(record.get("created_at")),
            updated_at=parse_db_datetime(record.get("updated_at")),
        )
