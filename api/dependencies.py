"""
Shared dependencies for the counter API.

This module provides:
- PocketBase client management (global instance authenticated as admin)
- The engine instance built over that client
- Caller resolution for routers
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import HTTPException, Request

from pocketbase import PocketBase
from ticketing.data.store import PocketBaseStore
from ticketing.engine import TicketingEngine
from ticketing.roles import Actor, Role, require_role

from .settings import get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================

# The engine only authenticates as admin, so one shared client serves every
# request; the PocketBase API itself is stateless.
_settings = get_settings()
pb_url = _settings.pocketbase_url
pb = PocketBase(pb_url)


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as admin."""
    settings = get_settings()
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


# ========================================
# Engine
# ========================================

engine = TicketingEngine(PocketBaseStore(pb), _settings.engine_config())


def get_engine() -> TicketingEngine:
    """FastAPI dependency returning the engine (overridden in tests)."""
    return engine


# ========================================
# Callers
# ========================================


def get_optional_actor(request: Request) -> Actor | None:
    """The caller resolved by the auth middleware, or None for anonymous kiosks."""
    return getattr(request.state, "actor", None)


def get_current_actor(request: Request) -> Actor:
    """
    Dependency requiring an authenticated caller.

    Role checks happen in the engine; this only turns "nobody" into a 401.
    """
    actor = get_optional_actor(request)
    if actor is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return actor


def get_staff_actor(request: Request) -> Actor:
    """Dependency for staff-only reads; mutations are checked by the engine itself."""
    return require_role(get_current_actor(request), Role.STAFF, "view this information")


__all__ = [
    "pb",
    "pb_url",
    "authenticate_pb",
    "engine",
    "get_engine",
    "get_optional_actor",
    "get_current_actor",
    "get_staff_actor",
]
