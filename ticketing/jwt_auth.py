"""
PocketBase token validation for staff terminals.

Staff sign in against the PocketBase ``users`` collection; the API forwards
their bearer token here, which asks PocketBase to refresh it. A successful
refresh proves the token and returns the user record, including the
``role`` field the engine's capability checks read.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, cast

import httpx
import jwt
from jwt.exceptions import InvalidTokenError

from .roles import Actor, Role

logger = logging.getLogger(__name__)

# PocketBase's built-in admin collection
SUPERUSERS_COLLECTION = "_superusers"
SUPERUSERS_COLLECTION_ID = "pbc_3142635823"


def _decode_claims_unverified(token: str) -> dict[str, Any]:
    """Decode JWT claims WITHOUT verification. For inspection only."""
    try:
        return cast(dict[str, Any], jwt.decode(token, options={"verify_signature": False}))
    except InvalidTokenError:
        return {}


def _is_superuser_token(claims: dict[str, Any]) -> bool:
    collection_id = claims.get("collectionId", "")
    return collection_id in (SUPERUSERS_COLLECTION, SUPERUSERS_COLLECTION_ID)


class PocketBaseTokenValidator:
    """Validates PocketBase-issued tokens by calling the auth-refresh endpoint."""

    def __init__(self, pocketbase_url: str, users_collection: str = "users", cache_ttl: float = 60):
        self.pocketbase_url = pocketbase_url.rstrip("/")
        self.users_collection = users_collection
        self._validation_cache: dict[str, tuple[dict[str, Any], float]] = {}  # token_hash -> (claims, expiry)
        self._cache_ttl = cache_ttl

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """
        Validate a PocketBase token.

        Returns user claims if valid, None otherwise.
        """
        # Admin tokens are for the PocketBase dashboard, never for the API
        if _is_superuser_token(_decode_claims_unverified(token)):
            logger.warning("SECURITY: Rejecting _superusers admin token for API authentication.")
            return None

        cache_key = hashlib.sha256(token.encode()).hexdigest()[:32]
        cached = self._validation_cache.get(cache_key)
        if cached is not None:
            claims, expiry = cached
            if time.time() < expiry:
                logger.debug("Using cached PocketBase token validation")
                return claims
            del self._validation_cache[cache_key]

        try:
            response = httpx.post(
                f"{self.pocketbase_url}/api/collections/{self.users_collection}/auth-refresh",
                headers={"Authorization": f"Bearer {token}"},
                timeout=5.0,
            )
        except httpx.TimeoutException:
            logger.warning("PocketBase token validation timed out")
            return None
        except httpx.HTTPError as e:
            logger.error(f"Error validating PocketBase token: {type(e).__name__}: {e}")
            return None

        if response.status_code != 200:
            logger.debug(f"PocketBase auth-refresh returned status {response.status_code}")
            return None

        record = response.json().get("record", {})
        if record.get("collectionName") == SUPERUSERS_COLLECTION:
            logger.warning("SECURITY: Rejecting _superusers record for API authentication.")
            return None

        claims = {
            "sub": record.get("id", ""),
            "email": record.get("email", ""),
            "name": record.get("name", record.get("username", "")),
            "role": record.get("role", ""),
            "_pb_record": record,
        }
        self._validation_cache[cache_key] = (claims, time.time() + self._cache_ttl)
        logger.info(f"PocketBase token validated for user: {claims['email'] or claims['sub']}")
        return claims


def actor_from_claims(claims: dict[str, Any]) -> Actor:
    """Build the engine's view of a validated user. Unknown roles get no capabilities."""
    return Actor(
        user_id=claims.get("sub", ""),
        role=Role.parse(claims.get("role")),
        display_name=claims.get("name") or claims.get("email", ""),
    )


def extract_bearer_token(authorization_header: str | None) -> str | None:
    """Extract bearer token from Authorization header."""
    if not authorization_header:
        return None

    parts = authorization_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]
