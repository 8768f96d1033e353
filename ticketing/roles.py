"""Caller roles and the single capability predicate used by every operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .errors import AuthorizationError


class Role(IntEnum):
    """Ordered caller roles. Higher values include the capabilities of lower ones."""

    NONE = 0
    STAFF = 1
    ADMIN = 2
    SUPERADMIN = 3

    @classmethod
    def parse(cls, value: str | None) -> Role:
        """Parse a stored role name; unknown or missing values map to NONE."""
        if not value:
            return cls.NONE
        try:
            return cls[value.strip().upper()]
        except KeyError:
            return cls.NONE

    @property
    def label(self) -> str:
        return self.name.lower()


def meets_minimum(role: Role, required: Role) -> bool:
    """Return True if role grants at least the capabilities of required."""
    return role >= required


@dataclass(frozen=True)
class Actor:
    """An authenticated caller as seen by the engine."""

    user_id: str
    role: Role
    display_name: str = ""

    @classmethod
    def anonymous(cls) -> Actor:
        return cls(user_id="", role=Role.NONE, display_name="kiosk")


def require_role(actor: Actor | None, required: Role, action: str) -> Actor:
    """Raise AuthorizationError unless actor holds at least the required role.

    Args:
        actor: The caller, or None when unauthenticated
        required: Minimum role for the action
        action: Short description used in the error message (e.g. "process the queue")

    Returns:
        The actor, narrowed to non-None
    """
    if actor is None or not meets_minimum(actor.role, required):
        raise AuthorizationError(
            f"Unauthorized: only {required.label} or above can {action}",
            required=required.label,
            role=actor.role.label if actor else Role.NONE.label,
        )
    return actor
