#!/usr/bin/env python3
"""
Counter API - HTTP API layer for the service counter ticketing engine.

This is the main FastAPI application that serves as the backend-for-frontend (BFF)
for the kiosk, the staff terminals and the public queue display. It exposes:
- Kiosk intake (public)
- Request and document processing (staff)
- Queue flow and display board
- Person registry and catalog management
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ticketing.auth_middleware import AuthMiddleware
from ticketing.errors import (
    AuthorizationError,
    ConflictError,
    EmptyQueueError,
    InvalidTransitionError,
    NotFoundError,
    StoreError,
    TicketingError,
    ValidationError,
)
from ticketing.logging_config import configure_logging, get_logger

from .dependencies import authenticate_pb
from .settings import get_settings

# Configure unified logging format
# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = get_logger(__name__)

# Most specific first: EmptyQueueError must not be caught as a generic error
ERROR_STATUS: list[tuple[type[TicketingError], int]] = [
    (EmptyQueueError, 404),
    (ValidationError, 422),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (ConflictError, 409),
    (StoreError, 503),
]


def error_status(exc: TicketingError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()

    if not settings.skip_pb_auth:
        await authenticate_pb()
    else:
        logger.warning("Skipping PocketBase authentication (SKIP_PB_AUTH=true)")

    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Counter API", description="Service counter ticketing API", lifespan=lifespan)

    # Add exception handlers
    @app.exception_handler(401)
    async def unauthorized_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=401, content={"detail": str(exc.detail) if hasattr(exc, "detail") else "Unauthorized"}
        )

    @app.exception_handler(TicketingError)
    async def ticketing_error_handler(request: Request, exc: TicketingError) -> JSONResponse:
        status = error_status(exc)
        content: dict[str, Any] = {"detail": exc.message}
        if isinstance(exc, EmptyQueueError):
            content["code"] = "empty_queue"
        if status >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
        else:
            logger.debug(f"{request.method} {request.url.path} -> {status}: {exc.message}")
        return JSONResponse(status_code=status, content=content)

    # Load settings
    settings = get_settings()

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    # Add authentication middleware (runs after CORS due to reverse order)
    app.add_middleware(
        AuthMiddleware,
        auth_mode=settings.get_effective_auth_mode(),
        pocketbase_url=settings.pocketbase_url,
        users_collection=settings.users_collection,
    )

    # Register routers
    from .routers import document_types, items, kiosk, persons, queue, repair, requests

    app.include_router(kiosk.router)
    app.include_router(document_types.router)
    app.include_router(requests.router)
    app.include_router(items.router)
    app.include_router(queue.router)
    app.include_router(persons.router)
    app.include_router(repair.router)

    # Core endpoints (not in a router)
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "counter-api"}

    @app.get("/api/config")
    async def get_auth_config() -> dict[str, Any]:
        """Get authentication configuration for frontends."""
        return {
            "auth_mode": settings.get_effective_auth_mode(),
            "pocketbase_url": settings.pocketbase_url,
            "users_collection": settings.users_collection,
        }

    return app


# Create app instance for uvicorn
app = create_app()
