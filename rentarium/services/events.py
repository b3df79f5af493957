"""In-process event bus for cross-component reactions."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantTerminated:
    """Published after a tenant's contract is terminated."""

    tenant_id: int
    tenant_name: str
    terminated_by: str
    termination_date: date
    reason: str | None = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EventBus:
    """Synchronous publish/subscribe keyed by event class.

    Handlers run in subscription order inside publish(); an exception in a
    handler propagates to the publisher.
    """

    def __init__(self):
        self._handlers: dict[type, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("Subscribed %s to %s", getattr(handler, "__name__", handler), event_type.__name__)

    def publish(self, event) -> None:
        handlers = self._handlers.get(type(event), [])
        logger.debug("Publishing %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            handler(event)


__all__ = ["EventBus", "TenantTerminated"]
