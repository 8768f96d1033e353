"""Human-readable sequential identifiers.

Three series are issued by the engine:

    request   REQ-YYYYMMDD-NNN   resets each local calendar day
    ticket    Q-NNN              resets each local calendar day
    registry  {PREFIX}-NNNNN     never resets

``next_number`` is the read-only high-water computation: it scans the series'
source collection within the reset window and returns max+1. ``reserve``
turns a candidate into an owned identifier by inserting a reservation whose
key is unique in the store, so two writers can never leave with the same
number. Numbers wider than the pad width are not truncated.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from .config import EngineConfig
from .data.repositories.reservation_repository import ReservationRepository
from .data.store import Condition, RecordStore, gte, lt, ne
from .errors import ConflictError, DuplicateKeyError
from .shared.dates import day_bounds, local_day

logger = logging.getLogger(__name__)

# Scope used for series that never reset
ALL_TIME = "all"


class Series(Enum):
    REQUEST = "request"
    TICKET = "ticket"
    REGISTRY = "registry"


@dataclass(frozen=True)
class SeriesFormat:
    """Where a series is stored and how its identifiers look."""

    collection: str
    field: str
    width: int
    time_field: str | None = None  # None means the series never resets

    @property
    def daily(self) -> bool:
        return self.time_field is not None


SERIES_FORMATS: dict[Series, SeriesFormat] = {
    Series.REQUEST: SeriesFormat("requests", "request_number", 3, "requested_at"),
    Series.TICKET: SeriesFormat("tickets", "ticket_number", 3, "created_at"),
    Series.REGISTRY: SeriesFormat("persons", "registry_number", 5),
}


class SequenceAllocator:
    """Allocates request, ticket and registry numbers."""

    def __init__(self, store: RecordStore, config: EngineConfig, reservations: ReservationRepository | None = None):
        self.store = store
        self.config = config
        self.reservations = reservations or ReservationRepository(store)

    def prefix(self, series: Series, day: date) -> str:
        """Literal part of identifiers issued on day, up to and including the last dash."""
        if series is Series.REQUEST:
            return f"REQ-{day:%Y%m%d}-"
        if series is Series.TICKET:
            return "Q-"
        return f"{self.config.registry_prefix}-"

    def format(self, series: Series, day: date, number: int) -> str:
        width = SERIES_FORMATS[series].width
        return f"{self.prefix(series, day)}{number:0{width}d}"

    def parse(self, series: Series, day: date, identifier: str) -> int | None:
        """Extract the numeric suffix, or None if identifier is not of this series/day."""
        pattern = re.compile(rf"^{re.escape(self.prefix(series, day))}(\d+)$")
        match = pattern.match(identifier or "")
        return int(match.group(1)) if match else None

    def _scope(self, series: Series, day: date) -> str:
        return day.strftime("%Y%m%d") if SERIES_FORMATS[series].daily else ALL_TIME

    def _highest_issued(self, series: Series, day: date) -> int:
        """Highest number already stored on source records within the reset window."""
        fmt = SERIES_FORMATS[series]
        conditions: list[Condition] = [ne(fmt.field, "")]
        if fmt.time_field:
            start, end = day_bounds(day, self.config.zone)
            conditions += [gte(fmt.time_field, start), lt(fmt.time_field, end)]

        records = self.store.find(
            fmt.collection, conditions, sort=[f"-{fmt.field}"], limit=self.config.sequence_scan_limit
        )
        if len(records) >= self.config.sequence_scan_limit:
            logger.warning(
                f"Sequence scan for {series.value} hit the limit of {self.config.sequence_scan_limit} records"
            )

        highest = 0
        for record in records:
            number = self.parse(series, day, record.get(fmt.field, ""))
            if number is not None and number > highest:
                highest = number
        logger.debug(f"Scanned {len(records)} {fmt.collection} records for {series.value}: max={highest}")
        return highest

    def next_number(self, series: Series, on: datetime) -> str:
        """Return the next identifier after those stored for the window containing on.

        Read-only; two callers may receive the same value. Use ``reserve`` to
        obtain an identifier that is yours.
        """
        day = local_day(on, self.config.zone)
        return self.format(series, day, self._highest_issued(series, day) + 1)

    def reserve(self, series: Series, on: datetime) -> str:
        """Allocate and claim the next identifier for the window containing on.

        Raises:
            ConflictError: every candidate within sequence_max_attempts was taken
        """
        day = local_day(on, self.config.zone)
        scope = self._scope(series, day)
        base = max(self._highest_issued(series, day), self.reservations.highest(series.value, scope))

        for attempt in range(1, self.config.sequence_max_attempts + 1):
            candidate = base + attempt
            try:
                self.reservations.reserve(series.value, scope, candidate, on)
            except DuplicateKeyError:
                logger.debug(f"{series.value} {scope}:{candidate} already reserved, trying next")
                continue
            identifier = self.format(series, day, candidate)
            logger.debug(f"Reserved {identifier}")
            return identifier

        raise ConflictError(
            f"Could not allocate a {series.value} number after {self.config.sequence_max_attempts} attempts",
            series=series.value,
            scope=scope,
        )
