"""State machines for Requests, LineItems and Tickets."""

from __future__ import annotations

from .queue_lifecycle import QueueLifecycle
from .request_lifecycle import RequestLifecycle

__all__ = ["QueueLifecycle", "RequestLifecycle"]
