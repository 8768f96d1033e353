"""
Application settings using pydantic-settings for type-safe configuration.

All environment variables are centralized here with proper typing, validation,
and sensible defaults. Settings are loaded once at startup and cached.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ticketing.config import EngineConfig

logger = logging.getLogger(__name__)


def _is_docker_environment() -> bool:
    """Detect if running inside a Docker container."""
    # Check for .dockerenv file (most reliable)
    if Path("/.dockerenv").exists():
        return True
    # Check cgroup (works on most Linux systems)
    try:
        with open("/proc/1/cgroup") as f:
            return "docker" in f.read()
    except (FileNotFoundError, PermissionError):
        pass
    return False


def _is_github_actions() -> bool:
    """Detect if running in GitHub Actions CI environment.

    Returns True only when BOTH CI=true AND GITHUB_ACTIONS=true are set.
    """
    return os.getenv("CI") == "true" and os.getenv("GITHUB_ACTIONS") == "true"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development.
    Production values should be set via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars not defined here
        case_sensitive=False,  # Allow AUTH_MODE or auth_mode
    )

    # === Authentication ===
    auth_mode: str = Field(
        default="production",
        description="Authentication mode: 'production' (PocketBase token validation) or 'bypass' (dev only)",
    )
    skip_pb_auth: bool = Field(
        default=False,
        description="Skip PocketBase authentication on startup (for testing)",
    )
    users_collection: str = Field(
        default="users",
        description="PocketBase auth collection staff sign in with",
    )

    # === PocketBase Configuration ===
    pocketbase_url: str = Field(
        default="http://127.0.0.1:8090",
        description="PocketBase server URL",
    )
    pocketbase_admin_email: str = Field(
        default="admin@counter.local",
        description="PocketBase admin email for API authentication",
    )
    pocketbase_admin_password: str = Field(
        default="",
        description="PocketBase admin password (required - no default for security)",
    )

    @field_validator("pocketbase_admin_password", mode="after")
    @classmethod
    def validate_admin_password(cls, v: str) -> str:
        """Validate admin password is set and not using insecure defaults."""
        insecure_defaults = {"password", "admin", "123456", ""}
        if v in insecure_defaults:
            logger.warning(
                "SECURITY WARNING: POCKETBASE_ADMIN_PASSWORD is not set or uses an insecure default. "
                "Set a strong password in your .env file for production use."
            )
        return v

    # === CORS Configuration ===
    # Note: Use str type for env var parsing, convert to list via property
    allowed_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS",
        description="Allowed CORS origins (comma-separated)",
    )

    # === Docker Detection ===
    is_docker: bool = Field(
        default=False,
        description="Whether running in Docker container",
    )

    # === Engine Settings ===
    tz: str = Field(
        default="UTC",
        description="Timezone whose calendar day resets request and ticket numbers",
    )
    registry_prefix: str = Field(
        default="REG",
        description="Prefix of person registry numbers (REG-00001)",
    )
    max_line_items: int = Field(default=50, ge=1, description="Maximum documents per request")
    duplicate_scan_limit: int = Field(default=100, ge=1, description="Candidates read per duplicate check")
    sequence_scan_limit: int = Field(default=5000, ge=1, description="Records read per sequence scan")
    sequence_max_attempts: int = Field(default=5, ge=1, description="Reservation attempts per identifier")
    counter_count: int = Field(
        default=0,
        ge=0,
        description="Number of service counters for automatic assignment (0 disables)",
    )
    orphan_grace_seconds: int = Field(
        default=120,
        ge=0,
        description="Age after which a pending request without a ticket is repaired",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse comma-separated origins string into list."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    @field_validator("is_docker", mode="before")
    @classmethod
    def parse_is_docker(cls, v: str | bool) -> bool:
        """Parse IS_DOCKER env var which can be 'true', '1', 'yes', etc."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes")
        return False

    @field_validator("auth_mode", mode="after")
    @classmethod
    def validate_auth_mode(cls, v: str) -> str:
        """Validate and normalize auth_mode."""
        v = v.lower()
        if v not in ("bypass", "production"):
            raise ValueError(f"Invalid AUTH_MODE: {v}. Must be 'bypass' or 'production'")
        return v

    @field_validator("tz", mode="after")
    @classmethod
    def validate_tz(cls, v: str) -> str:
        """Reject timezone names the system database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("registry_prefix", mode="after")
    @classmethod
    def validate_registry_prefix(cls, v: str) -> str:
        v = v.strip().upper()
        if not v or not v.isalnum():
            raise ValueError("REGISTRY_PREFIX must be non-empty and alphanumeric")
        return v

    def is_docker_environment(self) -> bool:
        """Check if running in a Docker environment."""
        return self.is_docker or _is_docker_environment()

    def get_effective_auth_mode(self) -> str:
        """Get effective auth mode, forcing production in Docker (except CI)."""
        if self.is_docker_environment() and not _is_github_actions():
            return "production"
        return self.auth_mode

    def engine_config(self) -> EngineConfig:
        """Engine limits and identifiers from these settings."""
        return EngineConfig(
            tz=self.tz,
            registry_prefix=self.registry_prefix,
            max_line_items=self.max_line_items,
            duplicate_scan_limit=self.duplicate_scan_limit,
            sequence_scan_limit=self.sequence_scan_limit,
            sequence_max_attempts=self.sequence_max_attempts,
            counter_count=self.counter_count,
            orphan_grace_seconds=self.orphan_grace_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the application.
    Use this function to access settings throughout the codebase.
    """
    return Settings()
