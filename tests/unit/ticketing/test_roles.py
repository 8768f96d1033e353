"""Tests for caller roles and the capability predicate."""

from __future__ import annotations

import pytest

from ticketing.errors import AuthorizationError
from ticketing.roles import Actor, Role, meets_minimum, require_role


class TestRole:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("staff", Role.STAFF),
            (" Admin ", Role.ADMIN),
            ("SUPERADMIN", Role.SUPERADMIN),
            ("owner", Role.NONE),
            (None, Role.NONE),
        ],
    )
    def test_parse(self, value, expected):
        assert Role.parse(value) is expected

    def test_roles_are_ordered(self):
        assert meets_minimum(Role.SUPERADMIN, Role.ADMIN)
        assert meets_minimum(Role.STAFF, Role.STAFF)
        assert not meets_minimum(Role.STAFF, Role.ADMIN)
        assert not meets_minimum(Role.NONE, Role.STAFF)


class TestRequireRole:
    def test_returns_actor_when_allowed(self, admin):
        assert require_role(admin, Role.STAFF, "process the queue") is admin

    def test_none_is_rejected(self):
        with pytest.raises(AuthorizationError) as exc_info:
            require_role(None, Role.STAFF, "process the queue")
        assert exc_info.value.context["role"] == "none"

    def test_message_names_required_role(self, staff):
        with pytest.raises(AuthorizationError, match="only superadmin or above can delete document types"):
            require_role(staff, Role.SUPERADMIN, "delete document types")

    def test_anonymous_actor_has_no_capabilities(self):
        with pytest.raises(AuthorizationError):
            require_role(Actor.anonymous(), Role.STAFF, "cancel requests")
