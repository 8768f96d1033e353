"""
TicketingEngine - single entry point wiring repositories and services.

Usage:
    store = PocketBaseStore(pb)
    engine = TicketingEngine(store, EngineConfig(tz="Asia/Manila"))
    receipt = engine.intake.submit(submission)
    ticket = engine.queue.process_next(actor)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from .catalog import DocumentCatalog
from .config import EngineConfig
from .data.repositories import (
    DocumentTypeRepository,
    LineItemRepository,
    PersonRepository,
    RequestRepository,
    ReservationRepository,
    TicketRepository,
)
from .data.store import RecordStore
from .duplicates import DuplicateResolver
from .intake import IntakeOrchestrator
from .lifecycle import QueueLifecycle, RequestLifecycle
from .persons import PersonRegistry
from .repair import IntakeRepair
from .sequence import SequenceAllocator
from .shared.dates import utc_now

logger = logging.getLogger(__name__)


class TicketingEngine:
    """
    Builds every engine component over one record store.

    All components share the same store, config and clock, so tests can run
    the whole engine against an in-memory store with a fixed clock.
    """

    def __init__(
        self,
        store: RecordStore,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.config = config or EngineConfig()
        self.clock = clock

        # Repositories
        self.person_repository = PersonRepository(store)
        self.document_type_repository = DocumentTypeRepository(store)
        self.request_repository = RequestRepository(store)
        self.line_item_repository = LineItemRepository(store)
        self.ticket_repository = TicketRepository(store)
        self.reservation_repository = ReservationRepository(store)

        # Leaf components
        self.sequence = SequenceAllocator(store, self.config, self.reservation_repository)
        self.duplicates = DuplicateResolver(self.person_repository, self.config)

        # Lifecycles
        self.requests = RequestLifecycle(
            self.request_repository,
            self.line_item_repository,
            self.document_type_repository,
            self.person_repository,
            self.ticket_repository,
            self.sequence,
            self.config,
            clock,
        )
        self.queue = QueueLifecycle(self.ticket_repository, self.request_repository, self.sequence, self.config, clock)

        # Supporting services
        self.persons = PersonRegistry(
            self.person_repository,
            self.request_repository,
            self.duplicates,
            self.sequence,
            self.config,
            clock,
        )
        self.catalog = DocumentCatalog(self.document_type_repository, self.line_item_repository)
        self.intake = IntakeOrchestrator(
            self.persons,
            self.requests,
            self.queue,
            self.person_repository,
            self.request_repository,
            clock,
        )
        self.repair = IntakeRepair(
            self.request_repository, self.ticket_repository, self.queue, self.config, clock
        )

        logger.debug(f"Ticketing engine ready (tz={self.config.tz}, counters={self.config.counter_count})")
