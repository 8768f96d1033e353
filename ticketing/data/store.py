"""Record store access for the engine.

The engine treats storage as a document store with indexed equality/range
lookups and a single-writer transaction per write. ``PocketBaseStore`` is
the production implementation; every query it issues carries an explicit
limit, and unique-index violations surface as ``DuplicateKeyError`` so the
engine can turn them into conflicts.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Protocol

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ..errors import DuplicateKeyError, NotFoundError, StoreError
from ..logging_config import TRACE
from ..shared.dates import to_db_date, to_db_datetime

logger = logging.getLogger(__name__)

# PocketBase rejects perPage above this
MAX_PAGE_SIZE = 500

OPERATORS = ("=", "!=", ">", ">=", "<", "<=")


@dataclass(frozen=True)
class Condition:
    """A single field comparison; conditions in a query are AND-ed."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op}")


def eq(field: str, value: Any) -> Condition:
    return Condition(field, "=", value)


def ne(field: str, value: Any) -> Condition:
    return Condition(field, "!=", value)


def gte(field: str, value: Any) -> Condition:
    return Condition(field, ">=", value)


def lt(field: str, value: Any) -> Condition:
    return Condition(field, "<", value)


def to_store_value(value: Any) -> Any:
    """Convert a Python value into the representation kept in the store."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_db_datetime(value)
    if isinstance(value, date):
        return to_db_date(value)
    return value


def _escape_filter_value(value: str) -> str:
    """Escape a string for a single-quoted PocketBase filter literal.

    Names like O'Neil would otherwise end the literal early.
    """
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _render_value(value: Any) -> str:
    value = to_store_value(value)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return repr(value)
    return f"'{_escape_filter_value(str(value))}'"


def render_filter(conditions: Sequence[Condition]) -> str:
    """Render conditions into PocketBase filter syntax joined with &&."""
    return " && ".join(f"{c.field} {c.op} {_render_value(c.value)}" for c in conditions)


def _check_limit(limit: int) -> None:
    if limit <= 0:
        raise ValueError("Queries must request a positive limit")


class RecordStore(Protocol):
    """Contract the engine needs from a document store."""

    def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        """Fetch a record by id, or None"""
        ...

    def find(
        self,
        collection: str,
        conditions: Sequence[Condition] = (),
        *,
        sort: Sequence[str] = (),
        limit: int,
    ) -> list[dict[str, Any]]:
        """Return up to limit records matching all conditions, in sort order.

        Sort keys are field names, prefixed with '-' for descending.
        """
        ...

    def first(
        self, collection: str, conditions: Sequence[Condition] = (), *, sort: Sequence[str] = ()
    ) -> dict[str, Any] | None:
        """Return the first matching record, or None"""
        ...

    def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a record; raises DuplicateKeyError on unique-index violations"""
        ...

    def update(self, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Patch fields of a record; raises NotFoundError if it is gone"""
        ...

    def delete(self, collection: str, record_id: str) -> None:
        """Delete a record; raises NotFoundError if it is gone"""
        ...


def _record_to_dict(record: Any) -> dict[str, Any]:
    """Flatten a PocketBase Record into a plain dict of its fields."""
    if isinstance(record, dict):
        return dict(record)
    data = {k: v for k, v in vars(record).items() if not k.startswith("_")}
    for meta in ("expand", "collection_id", "collection_name"):
        data.pop(meta, None)
    return data


def _is_unique_violation(error: ClientResponseError) -> bool:
    return getattr(error, "status", None) == 400 and "validation_not_unique" in str(getattr(error, "data", ""))


class PocketBaseStore:
    """RecordStore backed by the PocketBase SDK."""

    def __init__(self, client: PocketBase) -> None:
        self.pb = client

    def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        try:
            return _record_to_dict(self.pb.collection(collection).get_one(record_id))
        except ClientResponseError as e:
            if getattr(e, "status", None) == 404:
                return None
            raise StoreError(f"Failed to read {collection}/{record_id}: {e}") from e

    def find(
        self,
        collection: str,
        conditions: Sequence[Condition] = (),
        *,
        sort: Sequence[str] = (),
        limit: int,
    ) -> list[dict[str, Any]]:
        _check_limit(limit)
        query_params: dict[str, Any] = {"skipTotal": 1}
        if conditions:
            query_params["filter"] = render_filter(conditions)
        if sort:
            query_params["sort"] = ",".join(sort)

        per_page = min(limit, MAX_PAGE_SIZE)
        logger.log(TRACE, f"find {collection} params={query_params} limit={limit}")

        results: list[dict[str, Any]] = []
        page = 1
        while len(results) < limit:
            try:
                page_result = self.pb.collection(collection).get_list(page, per_page, query_params)
            except ClientResponseError as e:
                raise StoreError(f"Failed to query {collection}: {e}") from e
            items = page_result.items
            results.extend(_record_to_dict(item) for item in items)
            if len(items) < per_page:
                break
            page += 1
        return results[:limit]

    def first(
        self, collection: str, conditions: Sequence[Condition] = (), *, sort: Sequence[str] = ()
    ) -> dict[str, Any] | None:
        found = self.find(collection, conditions, sort=sort, limit=1)
        return found[0] if found else None

    def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        body = {k: to_store_value(v) for k, v in data.items()}
        logger.log(TRACE, f"create {collection} {body}")
        try:
            return _record_to_dict(self.pb.collection(collection).create(body))
        except ClientResponseError as e:
            if _is_unique_violation(e):
                raise DuplicateKeyError(f"Duplicate key in {collection}", collection=collection) from e
            raise StoreError(f"Failed to create {collection} record: {e}") from e

    def update(self, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        body = {k: to_store_value(v) for k, v in data.items()}
        logger.log(TRACE, f"update {collection}/{record_id} {body}")
        try:
            return _record_to_dict(self.pb.collection(collection).update(record_id, body))
        except ClientResponseError as e:
            if getattr(e, "status", None) == 404:
                raise NotFoundError(f"{collection} record {record_id} not found") from e
            if _is_unique_violation(e):
                raise DuplicateKeyError(f"Duplicate key in {collection}", collection=collection) from e
            raise StoreError(f"Failed to update {collection}/{record_id}: {e}") from e

    def delete(self, collection: str, record_id: str) -> None:
        try:
            self.pb.collection(collection).delete(record_id)
        except ClientResponseError as e:
            if getattr(e, "status", None) == 404:
                raise NotFoundError(f"{collection} record {record_id} not found") from e
            raise StoreError(f"Failed to delete {collection}/{record_id}: {e}") from e
