"""Base event handler classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from eventfetch.core.events.bus import AsyncEventBus, Event, Unsubscribe


class EventHandler(ABC):
    """Base class for object-style event handlers."""

    @property
    @abstractmethod
    def handled_events(self) -> list[Hashable]:
        """Event keys this handler processes (empty means all)."""
        ...

    @abstractmethod
    async def handle(self, event: Event) -> None:
        """
        Handle an event.

        Args:
            event: The event to handle
        """
        ...

    async def __call__(self, event: Event) -> None:
        """Make handler callable, filtering on handled events."""
        if not self.handled_events or event.type in self.handled_events:
            await self.handle(event)

    def attach(self, bus: AsyncEventBus, *, priority: int | None = None) -> Unsubscribe:
        """Subscribe to the handled events, or to every event when unfiltered."""
        target = self.handled_events or None
        return bus.subscribe(target, self, priority=priority)


class LoggingHandler(EventHandler):
    """Handler that logs every event it sees."""

    def __init__(self, event_types: list[Hashable] | None = None) -> None:
        """
        Initialize logging handler.

        Args:
            event_types: Event keys to log (None for all)
        """
        self._event_types = list(event_types or [])
        self._logger = structlog.get_logger(__name__)

    @property
    def handled_events(self) -> list[Hashable]:
        """Return handled event keys."""
        return self._event_types

    async def handle(self, event: Event) -> None:
        """Log the event."""
        self._logger.info(
            "Event received",
            event_id=event.id,
            source=event.source,
            payload=event.to_dict(),
        )
