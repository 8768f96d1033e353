"""In-memory RecordStore for engine tests.

Behaves like the PocketBase collections the engine uses: conditions are
AND-ed, sort keys accept a '-' prefix, every find needs a positive limit,
and the same unique indexes are enforced (empty values are not indexed).
"""

from __future__ import annotations

import copy
import itertools
from collections.abc import Sequence
from typing import Any

from ticketing.data.store import Condition, to_store_value
from ticketing.errors import DuplicateKeyError, NotFoundError

UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {
    "persons": ("registry_number",),
    "document_types": ("name",),
    "requests": ("request_number",),
    "tickets": ("request",),
    "sequence_reservations": ("key",),
}


def _matches(record: dict[str, Any], condition: Condition) -> bool:
    actual = record.get(condition.field)
    expected = to_store_value(condition.value)
    if condition.op == "=":
        return bool(actual == expected)
    if condition.op == "!=":
        return bool(actual != expected)
    if actual is None or expected is None or type(actual) is not type(expected):
        # Mixed types never satisfy a range comparison
        if not (isinstance(actual, int | float) and isinstance(expected, int | float)):
            return False
    if condition.op == ">":
        return bool(actual > expected)
    if condition.op == ">=":
        return bool(actual >= expected)
    if condition.op == "<":
        return bool(actual < expected)
    return bool(actual <= expected)


def _sort_key(value: Any) -> tuple[bool, Any]:
    return (value is None, value if value is not None else "")


class MemoryStore:
    """Dict-backed RecordStore with failure injection."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._ids = itertools.count(1)
        self._failures: list[tuple[str, str, Exception]] = []
        self.find_calls: list[tuple[str, int]] = []

    # ---- test helpers --------------------------------------------------

    def fail_next(self, collection: str, operation: str, error: Exception) -> None:
        """Make the next `operation` ("create", "update", "delete") on collection raise error."""
        self._failures.append((collection, operation, error))

    def _maybe_fail(self, collection: str, operation: str) -> None:
        for index, (coll, op, error) in enumerate(self._failures):
            if coll == collection and op == operation:
                del self._failures[index]
                raise error

    def all(self, collection: str) -> list[dict[str, Any]]:
        return [dict(r) for r in self.collections.get(collection, {}).values()]

    def snapshot(self) -> dict[str, dict[str, dict[str, Any]]]:
        return copy.deepcopy(self.collections)

    def insert_raw(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert without unique checks, for arranging inconsistent states."""
        record = {k: to_store_value(v) for k, v in data.items()}
        record["id"] = record.get("id") or f"{collection}_{next(self._ids)}"
        self.collections.setdefault(collection, {})[record["id"]] = record
        return dict(record)

    # ---- RecordStore ---------------------------------------------------

    def _check_unique(self, collection: str, record: dict[str, Any], own_id: str | None = None) -> None:
        for field in UNIQUE_FIELDS.get(collection, ()):
            value = record.get(field)
            if value in (None, ""):
                continue
            for other in self.collections.get(collection, {}).values():
                if other["id"] != own_id and other.get(field) == value:
                    raise DuplicateKeyError(f"Duplicate key in {collection}", collection=collection, field=field)

    def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        record = self.collections.get(collection, {}).get(record_id)
        return dict(record) if record else None

    def find(
        self,
        collection: str,
        conditions: Sequence[Condition] = (),
        *,
        sort: Sequence[str] = (),
        limit: int,
    ) -> list[dict[str, Any]]:
        if limit <= 0:
            raise ValueError("Queries must request a positive limit")
        self.find_calls.append((collection, limit))

        records = [
            dict(r) for r in self.collections.get(collection, {}).values() if all(_matches(r, c) for c in conditions)
        ]
        for key in reversed(list(sort)):
            descending = key.startswith("-")
            field = key.lstrip("-")
            records.sort(key=lambda r: _sort_key(r.get(field)), reverse=descending)
        return records[:limit]

    def first(
        self, collection: str, conditions: Sequence[Condition] = (), *, sort: Sequence[str] = ()
    ) -> dict[str, Any] | None:
        found = self.find(collection, conditions, sort=sort, limit=1)
        return found[0] if found else None

    def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail(collection, "create")
        record = {k: to_store_value(v) for k, v in data.items()}
        self._check_unique(collection, record)
        record["id"] = f"{collection}_{next(self._ids)}"
        self.collections.setdefault(collection, {})[record["id"]] = record
        return dict(record)

    def update(self, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail(collection, "update")
        existing = self.collections.get(collection, {}).get(record_id)
        if existing is None:
            raise NotFoundError(f"{collection} record {record_id} not found")
        merged = {**existing, **{k: to_store_value(v) for k, v in data.items()}}
        self._check_unique(collection, merged, own_id=record_id)
        self.collections[collection][record_id] = merged
        return dict(merged)

    def delete(self, collection: str, record_id: str) -> None:
        self._maybe_fail(collection, "delete")
        if record_id not in self.collections.get(collection, {}):
            raise NotFoundError(f"{collection} record {record_id} not found")
        del self.collections[collection][record_id]
