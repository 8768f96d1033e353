"""Reconciliation of interrupted intakes.

An intake that fails between writes, and whose rollback also fails, leaves a
Request in pending past the kiosk round-trip. This pass finds such Requests
and finishes them: a missing Ticket is issued, and a Ticket that was issued
without its Request being moved gets the Request moved to queued.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .config import EngineConfig
from .data.repositories.request_repository import RequestRepository
from .data.repositories.ticket_repository import TicketRepository
from .lifecycle.queue_lifecycle import QueueLifecycle
from .lifecycle.status import move_request
from .models import Request, RequestStatus
from .roles import Actor, Role, require_role
from .shared.dates import utc_now

logger = logging.getLogger(__name__)

DEFAULT_REPAIR_LIMIT = 100


@dataclass
class RepairReport:
    """Request numbers repaired and those that could not be"""

    repaired: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class IntakeRepair:
    """Finds and completes Requests stranded in pending."""

    def __init__(
        self,
        requests: RequestRepository,
        tickets: TicketRepository,
        queue_lifecycle: QueueLifecycle,
        config: EngineConfig,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.requests = requests
        self.tickets = tickets
        self.queue_lifecycle = queue_lifecycle
        self.config = config
        self.clock = clock

    def find_orphans(self, older_than: datetime | None = None, limit: int = DEFAULT_REPAIR_LIMIT) -> list[Request]:
        """Pending Requests created before older_than (default: now minus the grace period)."""
        if older_than is None:
            older_than = self.clock() - timedelta(seconds=self.config.orphan_grace_seconds)
        return self.requests.list_pending_before(older_than, limit)

    def reconcile(self, actor: Actor | None, limit: int = DEFAULT_REPAIR_LIMIT) -> RepairReport:
        """Queue every orphan. Failures are logged and reported, not raised."""
        require_role(actor, Role.ADMIN, "repair interrupted requests")
        report = RepairReport()
        for request in self.find_orphans(limit=limit):
            try:
                self._repair(request)
            except Exception:
                logger.error(f"Could not repair request {request.request_number}", exc_info=True)
                report.failed.append(request.request_number)
            else:
                report.repaired.append(request.request_number)

        if report.repaired or report.failed:
            logger.info(f"Repair pass: {len(report.repaired)} repaired, {len(report.failed)} failed")
        return report

    def _repair(self, request: Request) -> None:
        assert request.id is not None
        ticket = self.tickets.get_by_request(request.id)
        if ticket is None:
            self.queue_lifecycle.create(request.id)
            return
        logger.debug(f"Request {request.request_number} already has ticket {ticket.ticket_number}")
        move_request(self.requests, request, RequestStatus.QUEUED, self.clock())
