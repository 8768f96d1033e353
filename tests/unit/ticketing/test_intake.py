"""Tests for IntakeOrchestrator: the kiosk saga and its compensations."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from ticketing.errors import ConflictError, NotFoundError, StoreError, ValidationError
from ticketing.intake import GuestDetails, IntakeSubmission
from ticketing.models import ItemRequest, PersonStatus, RequestStatus, TicketStatus


@pytest.fixture
def guest():
    return GuestDetails(first_name=" Ana ", last_name="Reyes", birthdate=date(2001, 3, 9), location="Purok 1")


@pytest.fixture
def items(doc_types):
    return [ItemRequest(doc_types["clearance"].id), ItemRequest(doc_types["indigency"].id, purpose="School")]


class TestSubmit:
    def test_known_person(self, engine, person, items):
        receipt = engine.intake.submit(IntakeSubmission(items=items, person_id=person.id))
        assert receipt.ticket_number == "Q-001"
        assert receipt.request_number == "REQ-20250101-001"
        assert receipt.person_id == person.id
        assert receipt.total_price == 8000

        detail = engine.requests.get_detail(receipt.request_id)
        assert detail.request.status is RequestStatus.QUEUED
        assert detail.ticket.status is TicketStatus.WAITING

    def test_guest_becomes_provisional_person(self, engine, store, guest, items):
        receipt = engine.intake.submit(IntakeSubmission(items=items, guest=guest))

        created = engine.person_repository.get(receipt.person_id)
        assert created.status is PersonStatus.PROVISIONAL
        assert created.first_name == "Ana"
        assert created.registry_number is None
        # Provisional records do not consume registry numbers
        assert store.all("sequence_reservations") and all(
            r["series"] != "registry" for r in store.all("sequence_reservations")
        )

    def test_service_type_is_recorded(self, engine, person, items):
        receipt = engine.intake.submit(IntakeSubmission(items=items, person_id=person.id, service_type="cedula"))
        assert engine.queue.get_by_request(receipt.request_id).service_type == "cedula"

    @pytest.mark.parametrize("with_person,with_guest", [(False, False), (True, True)])
    def test_exactly_one_identity(self, engine, person, guest, items, with_person, with_guest):
        submission = IntakeSubmission(
            items=items,
            person_id=person.id if with_person else None,
            guest=guest if with_guest else None,
        )
        with pytest.raises(ValidationError):
            engine.intake.submit(submission)

    def test_unknown_person(self, engine, items):
        with pytest.raises(NotFoundError):
            engine.intake.submit(IntakeSubmission(items=items, person_id="nobody"))

    def test_invalid_items_write_nothing(self, engine, store, guest, doc_types):
        before = store.snapshot()
        with pytest.raises(ValidationError):
            engine.intake.submit(IntakeSubmission(items=[ItemRequest(doc_types["cedula"].id)], guest=guest))
        assert store.snapshot() == before


class TestCompensation:
    def test_ticket_failure_cancels_request_and_discards_guest(self, engine, store, guest, items):
        store.fail_next("tickets", "create", StoreError("store unavailable"))
        with pytest.raises(StoreError):
            engine.intake.submit(IntakeSubmission(items=items, guest=guest))

        (request,) = store.all("requests")
        assert request["status"] == "cancelled"
        assert store.all("tickets") == []
        # The cancelled request still refers to the provisional person
        (kept,) = store.all("persons")
        assert kept["status"] == "provisional"

    def test_request_failure_deletes_provisional_person(self, engine, store, guest, items):
        store.fail_next("requests", "create", StoreError("store unavailable"))
        with pytest.raises(StoreError):
            engine.intake.submit(IntakeSubmission(items=items, guest=guest))
        assert store.all("persons") == []
        assert store.all("requests") == []

    def test_known_person_is_never_deleted(self, engine, store, person, items):
        store.fail_next("tickets", "create", StoreError("store unavailable"))
        with pytest.raises(StoreError):
            engine.intake.submit(IntakeSubmission(items=items, person_id=person.id))
        assert engine.person_repository.get(person.id) is not None

    def test_conflict_propagates_after_rollback(self, engine, store, person, items):
        store.fail_next("tickets", "create", ConflictError("taken"))
        with pytest.raises(ConflictError):
            engine.intake.submit(IntakeSubmission(items=items, person_id=person.id))
        assert store.all("requests")[0]["status"] == "cancelled"

    def test_failed_rollback_is_logged_and_left_for_repair(self, engine, store, clock, person, items, caplog):
        store.fail_next("tickets", "create", StoreError("store unavailable"))
        store.fail_next("requests", "update", StoreError("still unavailable"))

        with caplog.at_level(logging.ERROR, logger="ticketing.intake"):
            with pytest.raises(StoreError, match="store unavailable"):
                engine.intake.submit(IntakeSubmission(items=items, person_id=person.id))

        assert "left for repair" in caplog.text
        (request,) = store.all("requests")
        assert request["status"] == "pending"
        clock.advance(minutes=5)
        assert [r.request_number for r in engine.repair.find_orphans()] == [
            request["request_number"]
        ]
