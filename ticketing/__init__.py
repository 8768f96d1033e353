"""Ticketing & lifecycle engine for a public service counter.

Visitors request documents at a kiosk, receive a day-scoped queue ticket, and
are served by staff until every requested item is produced and claimed.
"""

from __future__ import annotations

__version__ = "0.4.0"
