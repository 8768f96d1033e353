"""
Pydantic schemas for the public kiosk endpoint.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, model_validator

from ticketing.intake import GuestDetails, IntakeReceipt, IntakeSubmission
from ticketing.models import ItemRequest


class ItemRequestBody(BaseModel):
    document_type_id: str = Field(min_length=1)
    purpose: str = ""


class GuestBody(BaseModel):
    """A first-time visitor's details."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    birthdate: date
    middle_name: str = ""
    suffix: str | None = None
    location: str = ""


class KioskSubmission(BaseModel):
    """Request body for a kiosk submission: an existing person or a guest."""

    items: list[ItemRequestBody]
    person_id: str | None = None
    guest: GuestBody | None = None
    service_type: str = "certificate"

    @model_validator(mode="after")
    def check_person_or_guest(self) -> KioskSubmission:
        """Exactly one of person_id and guest must be given."""
        if (self.person_id is None) == (self.guest is None):
            raise ValueError("Provide either person_id or guest")
        return self

    def to_domain(self) -> IntakeSubmission:
        guest = None
        if self.guest is not None:
            guest = GuestDetails(
                first_name=self.guest.first_name,
                last_name=self.guest.last_name,
                birthdate=self.guest.birthdate,
                middle_name=self.guest.middle_name,
                suffix=self.guest.suffix,
                location=self.guest.location,
            )
        return IntakeSubmission(
            items=[ItemRequest(document_type_id=i.document_type_id, purpose=i.purpose) for i in self.items],
            person_id=self.person_id,
            guest=guest,
            service_type=self.service_type,
        )


class IntakeReceiptResponse(BaseModel):
    """What the kiosk prints for the visitor."""

    ticket_number: str
    request_number: str
    request_id: str
    person_id: str
    total_price: int

    @classmethod
    def from_domain(cls, receipt: IntakeReceipt) -> IntakeReceiptResponse:
        return cls(
            ticket_number=receipt.ticket_number,
            request_number=receipt.request_number,
            request_id=receipt.request_id,
            person_id=receipt.person_id,
            total_price=receipt.total_price,
        )
