"""Engine configuration.

The engine takes a plain EngineConfig so it can run without the API layer;
``api.settings.Settings.engine_config()`` builds one from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from zoneinfo import ZoneInfo

DEFAULT_MAX_LINE_ITEMS = 50
DEFAULT_DUPLICATE_SCAN_LIMIT = 100
DEFAULT_SEQUENCE_SCAN_LIMIT = 5000
DEFAULT_SEQUENCE_MAX_ATTEMPTS = 5
DEFAULT_ORPHAN_GRACE_SECONDS = 120


@dataclass(frozen=True)
class EngineConfig:
    """Tunable limits and identifiers for the ticketing engine."""

    tz: str = "UTC"
    registry_prefix: str = "REG"
    max_line_items: int = DEFAULT_MAX_LINE_ITEMS
    duplicate_scan_limit: int = DEFAULT_DUPLICATE_SCAN_LIMIT
    sequence_scan_limit: int = DEFAULT_SEQUENCE_SCAN_LIMIT
    sequence_max_attempts: int = DEFAULT_SEQUENCE_MAX_ATTEMPTS
    counter_count: int = 0  # 0 disables automatic counter assignment
    orphan_grace_seconds: int = DEFAULT_ORPHAN_GRACE_SECONDS

    @property
    def zone(self) -> ZoneInfo:
        """Timezone that defines the calendar day for daily-reset series."""
        return ZoneInfo(self.tz)
