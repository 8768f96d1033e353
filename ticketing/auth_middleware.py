"""
Authentication middleware for the counter API.

Resolves the caller once per request and stores it as ``request.state.actor``.
Kiosk and display endpoints are public, so an unauthenticated request is not
rejected here; the engine's role checks and the API's ``get_current_actor``
dependency decide what an anonymous caller may do.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .jwt_auth import PocketBaseTokenValidator, actor_from_claims, extract_bearer_token
from .roles import Actor, Role

logger = logging.getLogger(__name__)

# Paths that never need the caller resolved
UNAUTHENTICATED_PATHS = ("/health", "/api/health")

DEV_ACTOR = Actor(user_id="dev-superadmin", role=Role.SUPERADMIN, display_name="Dev Superadmin")


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Middleware for handling authentication.

    Supports two modes:
    - bypass: Every request acts as a superadmin (development only)
    - production: Validate PocketBase user tokens and read the user's role
    """

    def __init__(
        self,
        app: Any,
        auth_mode: str,
        pocketbase_url: str,
        users_collection: str = "users",
        validator: PocketBaseTokenValidator | None = None,
    ):
        super().__init__(app)
        self.auth_mode = auth_mode.lower()
        if self.auth_mode not in ("bypass", "production"):
            raise ValueError(f"Invalid AUTH_MODE: {auth_mode}. Must be bypass or production")

        self.validator = validator
        if self.auth_mode == "production" and self.validator is None:
            self.validator = PocketBaseTokenValidator(pocketbase_url, users_collection=users_collection)
        logger.info(f"Authentication middleware initialized in {self.auth_mode} mode")

    async def _resolve_actor(self, request: Request) -> Actor | None:
        if self.auth_mode == "bypass":
            return DEV_ACTOR

        token = extract_bearer_token(request.headers.get("Authorization"))
        if not token or self.validator is None:
            return None

        claims = await asyncio.to_thread(self.validator.validate_token, token)
        if not claims:
            logger.debug(f"Token rejected for {request.url.path}")
            return None
        return actor_from_claims(claims)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Attach the resolved actor (or None) to the request state."""
        if request.url.path in UNAUTHENTICATED_PATHS or request.method == "OPTIONS":
            request.state.actor = None
            return await call_next(request)

        actor = await self._resolve_actor(request)
        request.state.actor = actor
        if actor is not None:
            logger.debug(f"Request from {actor.user_id} ({actor.role.label}) to {request.url.path}")
        return await call_next(request)
