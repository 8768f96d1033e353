"""
Root test configuration and fixtures for the ticketing project.

This conftest.py provides common fixtures for all tests:
- PocketBase is patched so nothing connects to a real server
- An in-memory record store, a controllable clock and an engine built on both
- Actors for each role and a seeded document catalog
"""

from __future__ import annotations

import os
import sys
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.memory_store import MemoryStore  # noqa: E402
from ticketing.config import EngineConfig  # noqa: E402
from ticketing.engine import TicketingEngine  # noqa: E402
from ticketing.models import DocumentType, Person  # noqa: E402
from ticketing.roles import Actor, Role  # noqa: E402


def create_mock_pocketbase():
    """Create a mock PocketBase instance."""
    mock_pb = Mock()

    mock_collection = Mock()
    mock_collection.auth_with_password = Mock(return_value=True)

    mock_list_response = Mock()
    mock_list_response.items = []
    mock_list_response.total_items = 0
    mock_list_response.total_pages = 1
    mock_list_response.page = 1
    mock_list_response.per_page = 30

    mock_collection.get_list = Mock(return_value=mock_list_response)
    mock_collection.get_one = Mock()
    mock_collection.create = Mock(return_value=Mock(id="mock-id"))
    mock_collection.update = Mock()
    mock_collection.delete = Mock()

    # Make collection callable to return itself for chaining
    mock_pb.collection = Mock(return_value=mock_collection)

    mock_pb.auth_store = Mock()
    mock_pb.auth_store.base_token = "mock-token"

    return mock_pb


@pytest.fixture
def mock_pocketbase():
    """Create a mock PocketBase instance for tests that need it."""
    return create_mock_pocketbase()


@pytest.fixture(autouse=True)
def mock_all_external_services():
    """Automatically mock PocketBase to prevent real connections.

    Set SKIP_MOCKING=true to run against a real server.
    """
    if os.environ.get("SKIP_MOCKING") == "true":
        yield {}
        return

    mock_pb = create_mock_pocketbase()
    with patch("pocketbase.PocketBase") as mock_pb_class:
        mock_pb_class.return_value = mock_pb
        yield {"pocketbase": mock_pb}


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 1, 8, 0, tzinfo=UTC))


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def engine(store: MemoryStore, config: EngineConfig, clock: FakeClock) -> TicketingEngine:
    return TicketingEngine(store, config, clock)


@pytest.fixture
def staff() -> Actor:
    return Actor(user_id="user-staff", role=Role.STAFF, display_name="Counter Staff")


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id="user-admin", role=Role.ADMIN, display_name="Office Admin")


@pytest.fixture
def superadmin() -> Actor:
    return Actor(user_id="user-super", role=Role.SUPERADMIN, display_name="Super Admin")


@pytest.fixture
def doc_types(engine: TicketingEngine) -> dict[str, DocumentType]:
    """Seeded catalog: clearance 5000, indigency 3000 (purpose required), inactive cedula."""
    repo = engine.document_type_repository
    return {
        "clearance": repo.create(DocumentType(name="Barangay Clearance", price=5000, template_key="clearance")),
        "indigency": repo.create(
            DocumentType(name="Certificate of Indigency", price=3000, requires_purpose=True, template_key="indigency")
        ),
        "cedula": repo.create(DocumentType(name="Community Tax Certificate", price=2000, is_active=False)),
    }


@pytest.fixture
def person(engine: TicketingEngine) -> Person:
    """An active, registered person."""
    return engine.person_repository.create(
        Person(
            first_name="Juan",
            middle_name="Santos",
            last_name="Dela Cruz",
            birthdate=date(1990, 5, 17),
            location="Purok 3",
            registry_number="REG-00001",
        )
    )
