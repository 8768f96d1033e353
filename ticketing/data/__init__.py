"""Data access layer: record store adapters and repositories."""

from __future__ import annotations

from .store import Condition, PocketBaseStore, RecordStore, render_filter

__all__ = ["Condition", "PocketBaseStore", "RecordStore", "render_filter"]
