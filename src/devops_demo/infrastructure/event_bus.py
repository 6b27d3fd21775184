"""Event bus infrastructure for the DevOps pipeline simulator.

Provides a synchronous pub-sub event bus plus an in-memory event store for
inspection.  The bus dispatches ``DomainEvent`` instances to registered
handlers, catching and logging errors so that a single failing subscriber
never breaks the handler that published the event.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Sequence

from devops_demo.domain.events import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


# ===================================================================== #
#  Event Bus                                                             #
# ===================================================================== #

class EventBus:
    """Synchronous pub-sub for domain events.

    Handlers run **in registration order**, global handlers before typed
    ones.  A handler that raises is logged and skipped.

    Usage::

        bus = EventBus()
        bus.subscribe(BuildFinished, on_build)
        bus.publish(BuildFinished(build_id="ab12cd34", success=True))
    """

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[Handler]] = defaultdict(list)
        self._global_handlers: list[Handler] = []

    # -- subscription -------------------------------------------------------

    def subscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        """Register *handler* for a specific *event_type*."""
        self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: Handler) -> None:
        """Register *handler* to receive **every** published event."""
        self._global_handlers.append(handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: Handler) -> bool:
        """Remove *handler* from *event_type*. Returns ``True`` if found."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    # -- publishing ---------------------------------------------------------

    def publish(self, event: DomainEvent) -> None:
        """Publish *event* to all matching handlers (global first, then typed)."""
        handlers = list(self._global_handlers) + list(self._handlers.get(type(event), []))
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Error in handler %r for %s", handler, type(event).__name__
                )


# ===================================================================== #
#  Event Store                                                           #
# ===================================================================== #

class EventStore:
    """In-memory append-only event log.

    Wire it to a bus with ``bus.subscribe_all(store.append)``.  The log is
    process-local and bounded by *max_size* (``0`` = unlimited).
    """

    def __init__(self, max_size: int = 0) -> None:
        self._events: list[DomainEvent] = []
        self._max_size = max_size

    def append(self, event: DomainEvent) -> None:
        self._events.append(event)
        if self._max_size > 0 and len(self._events) > self._max_size:
            self._events = self._events[-self._max_size:]

    def query(
        self,
        event_type: type[DomainEvent] | None = None,
        limit: int = 0,
    ) -> Sequence[DomainEvent]:
        """Return stored events, optionally filtered by type and truncated
        to the *limit* most recent."""
        result = list(self._events)
        if event_type is not None:
            result = [e for e in result if isinstance(e, event_type)]
        if limit > 0:
            result = result[-limit:]
        return result

    def __len__(self) -> int:
        return len(self._events)
