"""Sequence reservation log.

Each allocated identifier is recorded once under a key that is unique in the
store (``series:scope:number``). Inserting the reservation is the atomic step
that claims a number: a second writer racing for the same number gets a
DuplicateKeyError instead of a duplicate identifier."""

from __future__ import annotations

from datetime import datetime

from ..store import eq
from .base import BaseRepository


def reservation_key(series: str, scope: str, number: int) -> str:
    return f"{series}:{scope}:{number}"


class ReservationRepository(BaseRepository):
    """Repository for sequence_reservations"""

    collection = "sequence_reservations"

    def highest(self, series: str, scope: str) -> int:
        """Highest number reserved for series within scope, or 0."""
        record = self.store.first(
            self.collection, [eq("series", series), eq("scope", scope)], sort=["-number"]
        )
        return int(record.get("number") or 0) if record else 0

    def reserve(self, series: str, scope: str, number: int, reserved_at: datetime) -> None:
        """Claim number; raises DuplicateKeyError if another writer already holds it."""
        self.store.create(
            self.collection,
            {
                "key": reservation_key(series, scope, number),
                "series": series,
                "scope": scope,
                "number": number,
                "reserved_at": reserved_at,
            },
        )
