"""Tests for SequenceAllocator: formats, daily reset and atomic reservation."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from ticketing.config import EngineConfig
from ticketing.errors import ConflictError, DuplicateKeyError
from ticketing.sequence import SequenceAllocator, Series

JAN_1 = datetime(2025, 1, 1, 9, 0, tzinfo=UTC)
JAN_2 = datetime(2025, 1, 2, 9, 0, tzinfo=UTC)


@pytest.fixture
def allocator(store, config):
    return SequenceAllocator(store, config)


class TestFormats:
    def test_first_numbers_of_each_series(self, allocator):
        assert allocator.next_number(Series.REQUEST, JAN_1) == "REQ-20250101-001"
        assert allocator.next_number(Series.TICKET, JAN_1) == "Q-001"
        assert allocator.next_number(Series.REGISTRY, JAN_1) == "REG-00001"

    def test_registry_prefix_is_configurable(self, store):
        allocator = SequenceAllocator(store, EngineConfig(registry_prefix="BRGY"))
        assert allocator.next_number(Series.REGISTRY, JAN_1) == "BRGY-00001"

    def test_numbers_beyond_width_are_not_truncated(self, store, allocator):
        store.insert_raw("tickets", {"ticket_number": "Q-999", "created_at": JAN_1})
        assert allocator.next_number(Series.TICKET, JAN_1) == "Q-1000"

    def test_parse_ignores_other_series_and_days(self, allocator):
        day = JAN_1.date()
        assert allocator.parse(Series.REQUEST, day, "REQ-20250101-042") == 42
        assert allocator.parse(Series.REQUEST, day, "REQ-20241231-042") is None
        assert allocator.parse(Series.TICKET, day, "T-001") is None
        assert allocator.parse(Series.REGISTRY, day, "REG-") is None


class TestNextNumber:
    def test_is_read_only(self, store, allocator):
        allocator.next_number(Series.REQUEST, JAN_1)
        allocator.next_number(Series.REQUEST, JAN_1)
        assert store.all("sequence_reservations") == []
        assert allocator.next_number(Series.REQUEST, JAN_1) == "REQ-20250101-001"

    def test_takes_max_of_the_day_not_count(self, store, allocator):
        for number in ("REQ-20250101-001", "REQ-20250101-007", "REQ-20250101-003"):
            store.insert_raw("requests", {"request_number": number, "requested_at": JAN_1})
        assert allocator.next_number(Series.REQUEST, JAN_1) == "REQ-20250101-008"

    def test_daily_series_reset(self, store, allocator):
        store.insert_raw("tickets", {"ticket_number": "Q-015", "created_at": JAN_1})
        assert allocator.next_number(Series.TICKET, JAN_2) == "Q-001"

    def test_registry_never_resets(self, store, allocator):
        store.insert_raw("persons", {"registry_number": "REG-00041", "created_at": JAN_1})
        assert allocator.next_number(Series.REGISTRY, JAN_2) == "REG-00042"

    def test_day_follows_configured_timezone(self, store):
        allocator = SequenceAllocator(store, EngineConfig(tz="Asia/Manila"))
        # 17:00 UTC on Jan 1 is already Jan 2 in Manila
        late = datetime(2025, 1, 1, 17, 0, tzinfo=UTC)
        store.insert_raw("requests", {"request_number": "REQ-20250101-004", "requested_at": JAN_1})
        assert allocator.next_number(Series.REQUEST, late) == "REQ-20250102-001"

    def test_scan_is_bounded(self, store):
        allocator = SequenceAllocator(store, EngineConfig(sequence_scan_limit=25))
        allocator.next_number(Series.TICKET, JAN_1)
        assert ("tickets", 25) in store.find_calls


class TestReserve:
    def test_sequential_reservations_increment(self, allocator):
        numbers = [allocator.reserve(Series.REQUEST, JAN_1) for _ in range(3)]
        assert numbers == ["REQ-20250101-001", "REQ-20250101-002", "REQ-20250101-003"]

    def test_reservation_recorded_with_unique_key(self, store, allocator):
        allocator.reserve(Series.TICKET, JAN_1)
        (reservation,) = store.all("sequence_reservations")
        assert reservation["key"] == "ticket:20250101:1"
        assert reservation["scope"] == "20250101"

    def test_registry_scope_is_all_time(self, store, allocator):
        allocator.reserve(Series.REGISTRY, JAN_1)
        assert store.all("sequence_reservations")[0]["key"] == "registry:all:1"

    def test_skips_number_taken_by_concurrent_writer(self, store, allocator):
        # Another writer claimed 1 between our scan and our insert
        store.fail_next("sequence_reservations", "create", DuplicateKeyError("taken"))
        assert allocator.reserve(Series.TICKET, JAN_1) == "Q-002"

    def test_reservations_and_stored_records_both_raise_the_floor(self, store, allocator):
        store.insert_raw("tickets", {"ticket_number": "Q-004", "created_at": JAN_1})
        assert allocator.reserve(Series.TICKET, JAN_1) == "Q-005"
        # The reserved number is not yet on any ticket but must not be reissued
        assert allocator.reserve(Series.TICKET, JAN_1) == "Q-006"

    def test_gives_up_after_max_attempts(self, store):
        allocator = SequenceAllocator(store, EngineConfig(sequence_max_attempts=2))
        store.fail_next("sequence_reservations", "create", DuplicateKeyError("taken"))
        store.fail_next("sequence_reservations", "create", DuplicateKeyError("taken"))
        with pytest.raises(ConflictError):
            allocator.reserve(Series.REQUEST, JAN_1)

    def test_duplicate_free_across_many_calls(self, allocator):
        numbers = [allocator.reserve(Series.REQUEST, JAN_1) for _ in range(50)]
        assert len(set(numbers)) == 50
        suffixes = [int(n.rsplit("-", 1)[1]) for n in numbers]
        assert suffixes == list(range(1, 51))
