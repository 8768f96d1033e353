"""
Pydantic schemas for person registry endpoints.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from ticketing.models import DuplicateMatch, Person, PersonStatus


class PersonResponse(BaseModel):
    """Response model for a registry record."""

    id: str
    registry_number: str | None = None
    first_name: str
    middle_name: str
    last_name: str
    suffix: str | None = None
    full_name: str
    birthdate: date
    location: str
    status: PersonStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, person: Person) -> PersonResponse:
        return cls(
            id=person.id or "",
            registry_number=person.registry_number,
            first_name=person.first_name,
            middle_name=person.middle_name,
            last_name=person.last_name,
            suffix=person.suffix,
            full_name=person.full_name,
            birthdate=person.birthdate,
            location=person.location,
            status=person.status,
            created_at=person.created_at,
            updated_at=person.updated_at,
        )


class PersonCreate(BaseModel):
    """Request model for staff registration."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    birthdate: date
    middle_name: str = ""
    suffix: str | None = None
    location: str = ""
    status: PersonStatus = PersonStatus.ACTIVE
    registry_number: str | None = None

    def to_domain(self) -> Person:
        return Person(
            first_name=self.first_name,
            last_name=self.last_name,
            birthdate=self.birthdate,
            middle_name=self.middle_name,
            suffix=self.suffix,
            location=self.location,
            status=self.status,
            registry_number=self.registry_number,
        )


class PersonUpdate(BaseModel):
    """Request model for editing a person. Omitted fields are unchanged."""

    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    suffix: str | None = None
    birthdate: date | None = None
    location: str | None = None
    status: PersonStatus | None = None


class ApproveRequest(BaseModel):
    """Optional explicit registry number when approving a provisional record."""

    registry_number: str | None = None


class DuplicateMatchResponse(BaseModel):
    person: PersonResponse
    confidence: str
    reason: str

    @classmethod
    def from_domain(cls, match: DuplicateMatch) -> DuplicateMatchResponse:
        return cls(
            person=PersonResponse.from_domain(match.person),
            confidence=match.confidence.value,
            reason=match.reason,
        )
