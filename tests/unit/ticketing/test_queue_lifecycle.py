"""Tests for QueueLifecycle: ticket issue, FIFO serving and request mirroring."""

from __future__ import annotations

from datetime import timedelta

import pytest

from ticketing.config import EngineConfig
from ticketing.engine import TicketingEngine
from ticketing.errors import (
    AuthorizationError,
    ConflictError,
    EmptyQueueError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ticketing.models import ItemRequest, RequestStatus, TicketStatus


@pytest.fixture
def new_request(engine, person, doc_types, clock):
    """Create a pending request one second after the previous one."""

    def _new():
        clock.advance(seconds=1)
        return engine.requests.create(person.id, [ItemRequest(doc_types["clearance"].id)]).request

    return _new


@pytest.fixture
def queued(engine, new_request):
    """Three queued requests with tickets Q-001..Q-003."""
    requests = [new_request() for _ in range(3)]
    tickets = [engine.queue.create(r.id) for r in requests]
    return list(zip(requests, tickets, strict=True))


def request_status(engine, request_id):
    return engine.request_repository.get(request_id).status


class TestCreate:
    def test_issues_waiting_ticket_and_queues_request(self, engine, new_request):
        request = new_request()
        ticket = engine.queue.create(request.id, service_type="clearance")
        assert ticket.status is TicketStatus.WAITING
        assert ticket.service_type == "clearance"
        assert ticket.counter is None
        assert request_status(engine, request.id) is RequestStatus.QUEUED

    def test_second_ticket_for_request_conflicts(self, engine, new_request):
        request = new_request()
        engine.queue.create(request.id)
        with pytest.raises(ConflictError):
            engine.queue.create(request.id)

    def test_request_must_be_pending(self, engine, staff, new_request):
        request = new_request()
        engine.requests.cancel(staff, request.id)
        with pytest.raises(InvalidTransitionError):
            engine.queue.create(request.id)

    def test_missing_request(self, engine):
        with pytest.raises(NotFoundError):
            engine.queue.create("missing")

    def test_ticket_numbers_reset_daily(self, engine, new_request, clock):
        engine.queue.create(new_request().id)
        clock.advance(days=1)
        assert engine.queue.create(new_request().id).ticket_number == "Q-001"


class TestProcessNext:
    def test_serves_in_fifo_order(self, engine, staff, queued):
        served = [engine.queue.process_next(staff).ticket_number for _ in range(3)]
        assert served == ["Q-001", "Q-002", "Q-003"]

    def test_stamps_server_and_mirrors_request(self, engine, staff, queued, clock):
        request, ticket = queued[0]
        served = engine.queue.process_next(staff)
        assert served.id == ticket.id
        assert served.status is TicketStatus.SERVING
        assert served.served_by == staff.user_id
        assert served.started_at == clock.now
        assert request_status(engine, request.id) is RequestStatus.SERVING

    def test_empty_queue_changes_nothing(self, engine, store, staff):
        before = store.snapshot()
        with pytest.raises(EmptyQueueError):
            engine.queue.process_next(staff)
        assert store.snapshot() == before

    def test_skipped_tickets_are_not_served(self, engine, staff, queued):
        engine.queue.update_status(staff, queued[0][1].id, TicketStatus.SKIPPED)
        assert engine.queue.process_next(staff).ticket_number == "Q-002"

    def test_request_completed_while_waiting_does_not_block_queue(self, engine, staff, queued):
        first_request, _ = queued[0]
        engine.requests.complete(staff, first_request.id)
        assert engine.queue.get_by_request(first_request.id).status is TicketStatus.DONE

        served = engine.queue.process_next(staff)
        assert served.id == queued[1][1].id
        assert engine.queue.process_next(staff).id == queued[2][1].id
        with pytest.raises(EmptyQueueError):
            engine.queue.process_next(staff)

    def test_explicit_counter(self, engine, staff, queued):
        assert engine.queue.process_next(staff, counter=4).counter == 4

    def test_requires_staff(self, engine, queued):
        with pytest.raises(AuthorizationError):
            engine.queue.process_next(None)

    def test_assigns_lowest_idle_counter(self, store, clock, staff, person, doc_types):
        engine = TicketingEngine(store, EngineConfig(counter_count=2), clock)
        for _ in range(3):
            clock.advance(seconds=1)
            request = engine.requests.create(person.id, [ItemRequest(doc_types["clearance"].id)]).request
            engine.queue.create(request.id)

        first = engine.queue.process_next(staff)
        second = engine.queue.process_next(staff)
        third = engine.queue.process_next(staff)
        assert (first.counter, second.counter, third.counter) == (1, 2, None)

        engine.queue.mark_done(staff, first.id)
        clock.advance(seconds=1)
        request = engine.requests.create(person.id, [ItemRequest(doc_types["clearance"].id)]).request
        engine.queue.create(request.id)
        assert engine.queue.process_next(staff).counter == 1


class TestUpdateStatus:
    def test_done_completes_request(self, engine, staff, queued):
        request, ticket = queued[0]
        engine.queue.process_next(staff)
        done = engine.queue.update_status(staff, ticket.id, TicketStatus.DONE)
        assert done.completed_at is not None
        stored = engine.request_repository.get(request.id)
        assert stored.status is RequestStatus.COMPLETED
        assert stored.completed_at == done.completed_at

    def test_waiting_cannot_jump_to_done(self, engine, staff, queued):
        with pytest.raises(InvalidTransitionError):
            engine.queue.update_status(staff, queued[0][1].id, TicketStatus.DONE)

    def test_skip_leaves_request_alone(self, engine, staff, queued):
        request, ticket = queued[0]
        engine.queue.update_status(staff, ticket.id, TicketStatus.SKIPPED)
        assert request_status(engine, request.id) is RequestStatus.QUEUED

    def test_terminal_ticket_cannot_move(self, engine, staff, queued):
        ticket = queued[0][1]
        engine.queue.update_status(staff, ticket.id, TicketStatus.SKIPPED)
        with pytest.raises(InvalidTransitionError):
            engine.queue.update_status(staff, ticket.id, TicketStatus.SERVING)

    def test_invalid_request_move_blocks_ticket_move(self, engine, store, staff, queued):
        request, ticket = queued[0]
        engine.requests.cancel(staff, request.id)
        # Reopen the ticket behind the engine's back
        store.update("tickets", ticket.id, {"status": "waiting"})
        with pytest.raises(InvalidTransitionError):
            engine.queue.update_status(staff, ticket.id, TicketStatus.SERVING)
        assert engine.ticket_repository.get(ticket.id).status is TicketStatus.WAITING

    def test_same_status_records_counter_only(self, engine, staff, queued):
        ticket = queued[0][1]
        updated = engine.queue.update_status(staff, ticket.id, TicketStatus.WAITING, counter=3)
        assert updated.status is TicketStatus.WAITING
        assert updated.counter == 3

    def test_mark_done_from_serving(self, engine, staff, queued):
        ticket = engine.queue.process_next(staff)
        assert engine.queue.mark_done(staff, ticket.id).status is TicketStatus.DONE


class TestAssignCounter:
    def test_assigns(self, engine, staff, queued):
        assert engine.queue.assign_counter(staff, queued[0][1].id, 2).counter == 2

    def test_counter_must_be_positive(self, engine, staff, queued):
        with pytest.raises(ValidationError):
            engine.queue.assign_counter(staff, queued[0][1].id, 0)

    def test_terminal_ticket_rejected(self, engine, staff, queued):
        ticket = queued[0][1]
        engine.queue.update_status(staff, ticket.id, TicketStatus.SKIPPED)
        with pytest.raises(ValidationError):
            engine.queue.assign_counter(staff, ticket.id, 1)


class TestReads:
    def test_get_by_number_is_scoped_to_the_day(self, engine, queued, clock):
        assert engine.queue.get_by_number("Q-002").id == queued[1][1].id
        assert engine.queue.get_by_number("Q-002", on=clock.now + timedelta(days=1)) is None
        assert engine.queue.get_by_number("Q-404") is None

    def test_list_by_status_and_counter(self, engine, staff, queued):
        engine.queue.process_next(staff, counter=1)
        engine.queue.process_next(staff, counter=2)
        assert [t.ticket_number for t in engine.queue.list_by_status(TicketStatus.SERVING, counter=2)] == ["Q-002"]
        assert [t.ticket_number for t in engine.queue.list_by_status(TicketStatus.WAITING)] == ["Q-003"]

    def test_display_board(self, engine, staff, queued, clock):
        for _ in range(2):
            ticket = engine.queue.process_next(staff)
            clock.advance(seconds=1)
            engine.queue.mark_done(staff, ticket.id)
        engine.queue.process_next(staff)

        board = engine.queue.display_board()
        assert board.waiting == []
        assert [t.ticket_number for t in board.serving] == ["Q-003"]
        assert [t.ticket_number for t in board.done] == ["Q-002", "Q-001"]
