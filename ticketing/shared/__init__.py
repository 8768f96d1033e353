"""Shared helpers for dates and names."""

from __future__ import annotations

from .dates import (
    day_bounds,
    local_day,
    parse_db_date,
    parse_db_datetime,
    to_db_date,
    to_db_datetime,
    utc_now,
)
from .name_utils import first_names_equivalent, normalize_name

__all__ = [
    "day_bounds",
    "first_names_equivalent",
    "local_day",
    "normalize_name",
    "parse_db_date",
    "parse_db_datetime",
    "to_db_date",
    "to_db_datetime",
    "utc_now",
]
