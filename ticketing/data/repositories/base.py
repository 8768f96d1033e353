"""Shared repository plumbing."""

from __future__ import annotations

from typing import Any

from ..store import RecordStore


def _blank_to_none(value: Any) -> Any:
    """PocketBase stores unset text/relation/date fields as empty strings."""
    return None if value == "" else value


class BaseRepository:
    """Base class binding a repository to one collection of the record store."""

    collection: str = ""

    def __init__(self, store: RecordStore) -> None:
        """Initialize repository with a record store.

        Args:
            store: RecordStore instance (PocketBaseStore in production)
        """
        self.store = store

    def _get(self, record_id: str) -> dict[str, Any] | None:
        if not record_id:
            return None
        return self.store.get(self.collection, record_id)

    def _patch(self, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return self.store.update(self.collection, record_id, fields)
