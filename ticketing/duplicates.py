"""Duplicate person detection.

Finds existing registry records that probably describe the same person as a
new or edited entry. Results inform staff; they never block a write.

Tiers:
    high    first and last name equal after normalization, same birthdate
    medium  first and last name equal, birthdates at most one day apart
    low     last name equal, first names nickname-equivalent or equal once
            punctuation is dropped, birthdates at most one day apart
"""

from __future__ import annotations

import logging
from datetime import date

from .config import EngineConfig
from .data.repositories.person_repository import PersonRepository
from .models import Confidence, DuplicateMatch, Person
from .shared.name_utils import first_names_equivalent, normalize_name

logger = logging.getLogger(__name__)

# Birthdates this many days apart still count as a probable match
BIRTHDATE_TOLERANCE_DAYS = 1


class DuplicateResolver:
    """Scores registry candidates against a name and birthdate."""

    def __init__(self, persons: PersonRepository, config: EngineConfig):
        self.persons = persons
        self.config = config

    def find_duplicates(
        self,
        first_name: str,
        last_name: str,
        birthdate: date,
        exclude_id: str | None = None,
    ) -> list[DuplicateMatch]:
        """Return probable duplicates ordered from most to least confident.

        Args:
            first_name: First name as entered
            last_name: Last name as entered
            birthdate: Birthdate as entered
            exclude_id: Person to leave out (the record being edited)
        """
        first = normalize_name(first_name)
        last = normalize_name(last_name)
        if not last:
            return []

        candidates = self.persons.find_by_last_name_prefix(last, self.config.duplicate_scan_limit)
        matches: list[DuplicateMatch] = []
        for candidate in candidates:
            if exclude_id and candidate.id == exclude_id:
                continue
            match = self._classify(first, last, birthdate, candidate)
            if match is not None:
                matches.append(match)

        # sorted() is stable, so equal tiers keep scan order
        matches = sorted(matches, key=lambda m: m.confidence.rank, reverse=True)
        logger.debug(f"Duplicate check for {first} {last}: {len(candidates)} candidates, {len(matches)} matches")
        return matches

    def _classify(self, first: str, last: str, birthdate: date, candidate: Person) -> DuplicateMatch | None:
        if normalize_name(candidate.last_name) != last:
            return None

        day_gap = abs((candidate.birthdate - birthdate).days)
        if day_gap > BIRTHDATE_TOLERANCE_DAYS:
            return None

        if normalize_name(candidate.first_name) == first:
            if day_gap == 0:
                return DuplicateMatch(candidate, Confidence.HIGH, "Same name and birthdate")
            return DuplicateMatch(candidate, Confidence.MEDIUM, "Same name, birthdate differs by one day")

        if first_names_equivalent(first, candidate.first_name):
            return DuplicateMatch(
                candidate,
                Confidence.LOW,
                f"Same last name, similar first name ({candidate.first_name}), close birthdate",
            )
        return None
