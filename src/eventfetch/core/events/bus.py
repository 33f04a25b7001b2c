"""Async event bus with priority ordering, one-shot and wildcard listeners."""

from __future__ import annotations

import inspect
import itertools
import time
from collections.abc import Awaitable, Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union
from uuid import uuid4

import structlog

from eventfetch.core.events.types import FetchEvent

logger = structlog.get_logger(__name__)

# Passing the wildcard marker as the target means "every event"
WILDCARD = None

DEFAULT_PRIORITY = 50

EventKey = Hashable
EventHandler = Callable[["Event"], Union[Awaitable[None], None]]
Unsubscribe = Callable[[], None]


@dataclass
class Event:
    """Represents one dispatch of an event key with its payload."""

    type: EventKey
    data: Any = None
    source: str = ""
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self) -> None:
        """Set source if not provided."""
        if not self.source:
            self.source = "unknown"

    @property
    def event_tag(self) -> EventKey:
        """The key this event was fired under."""
        return self.type

    def to_dict(self) -> dict[str, Any]:
        """Flatten the payload and attach ``eventTag``."""
        tag = _tag(self.type)
        payload = self.data
        if hasattr(payload, "to_wire"):
            payload = payload.to_wire()
        if isinstance(payload, Mapping):
            return {**payload, "eventTag": tag}
        return {"data": payload, "eventTag": tag}


@dataclass(eq=False)
class Listener:
    """A registered handler and its dispatch bookkeeping."""

    handler: EventHandler
    event_type: EventKey | None
    once: bool = False
    priority: int = DEFAULT_PRIORITY
    index: int = 0
    consumed: bool = False

    @property
    def sort_key(self) -> tuple[int, int]:
        return (-self.priority, self.index)


class AsyncEventBus:
    """
    In-process pub/sub bus with sequential awaited dispatch.

    Listeners for a key run in priority order (highest first, ties in
    subscription order), then wildcard listeners in their own order. Each
    listener is awaited before the next one starts, and an exception aborts
    the rest of the pass and propagates to the caller of :meth:`fire`.
    """

    def __init__(self, default_priority: int = DEFAULT_PRIORITY) -> None:
        """
        Initialize the event bus.

        Args:
            default_priority: Priority used when subscribe() is given none
        """
        self._handlers: dict[EventKey, list[Listener]] = {}
        self._wildcard_handlers: list[Listener] = []
        self._counter = itertools.count()
        self._default_priority = default_priority
        self._stats = {
            "events_fired": 0,
            "handlers_invoked": 0,
            "handler_errors": 0,
        }

    def subscribe(
        self,
        event_type: EventKey | Iterable[EventKey] | None,
        handler: EventHandler,
        *,
        once: bool = False,
        priority: int | None = None,
    ) -> Unsubscribe:
        """
        Subscribe to events.

        Args:
            event_type: Event key, a list/tuple/set of keys, or None for all events
            handler: Sync or async handler function
            once: Remove the handler after its first invocation
            priority: Higher runs earlier; defaults to the bus default

        Returns:
            Unsubscribe function
        """
        if priority is None:
            priority = self._default_priority
        index = next(self._counter)

        entries = [
            Listener(handler, key, once=once, priority=priority, index=index)
            for key in self._expand(event_type)
        ]
        for entry in entries:
            listeners = self._listeners(entry.event_type, create=True)
            listeners.append(entry)
            listeners.sort(key=lambda item: item.sort_key)

        def unsubscribe() -> None:
            while entries:
                self._discard(entries.pop())

        return unsubscribe

    def unsubscribe(
        self,
        event_type: EventKey | None,
        handler: EventHandler | None = None,
    ) -> None:
        """
        Unsubscribe from events.

        Args:
            event_type: Event key, or None for the wildcard listeners
            handler: Handler to remove, including every duplicate registration
                of it under the key; None removes every listener for the key
        """
        listeners = self._listeners(event_type)
        if listeners is None:
            return

        if handler is None:
            listeners.clear()
        else:
            listeners[:] = [entry for entry in listeners if entry.handler != handler]

        if event_type is not None and not listeners:
            self._handlers.pop(event_type, None)

    async def fire(
        self,
        event_type: EventKey,
        data: Any = None,
        source: str = "",
    ) -> Event:
        """
        Create an event and dispatch it to every matching listener.

        Args:
            event_type: Event key
            data: Event payload
            source: Event source

        Returns:
            The dispatched event
        """
        event = Event(type=event_type, data=data, source=source)
        await self.publish(event)
        return event

    async def publish(self, event: Event) -> None:
        """Dispatch a pre-built event to every matching listener."""
        self._stats["events_fired"] += 1

        # Snapshot so (un)subscribing mid-dispatch does not affect this pass
        listeners = list(self._handlers.get(event.type, ()))
        listeners.extend(self._wildcard_handlers)

        for listener in listeners:
            await self._invoke(listener, event)

    async def _invoke(self, listener: Listener, event: Event) -> None:
        """Invoke a single listener, removing it afterwards if one-shot."""
        if listener.once:
            if listener.consumed:
                return
            listener.consumed = True

        try:
            self._stats["handlers_invoked"] += 1
            result = listener.handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self._stats["handler_errors"] += 1
            logger.debug(
                "Handler failed, aborting dispatch",
                handler=getattr(listener.handler, "__name__", repr(listener.handler)),
                event_type=_tag(event.type),
                error=str(e),
            )
            raise
        finally:
            if listener.once:
                self._discard(listener)

    def listener_count(self, event_type: EventKey | None = WILDCARD) -> int:
        """Number of listeners registered for a key, or wildcard listeners for None."""
        listeners = self._listeners(event_type)
        return len(listeners) if listeners else 0

    def has_listeners(self, event_type: EventKey) -> bool:
        """Check if firing the key would reach at least one listener."""
        return bool(self._handlers.get(event_type) or self._wildcard_handlers)

    def clear(self) -> None:
        """Remove every listener."""
        self._handlers.clear()
        self._wildcard_handlers.clear()

    @property
    def stats(self) -> dict[str, int]:
        """Get event bus statistics."""
        return self._stats.copy()

    def _expand(self, event_type: EventKey | Iterable[EventKey] | None) -> list[EventKey | None]:
        if event_type is WILDCARD:
            return [WILDCARD]
        if isinstance(event_type, (list, tuple, set, frozenset)):
            return list(dict.fromkeys(event_type))
        return [event_type]

    def _listeners(self, event_type: EventKey | None, create: bool = False) -> list[Listener] | None:
        if event_type is WILDCARD:
            return self._wildcard_handlers
        if create:
            return self._handlers.setdefault(event_type, [])
        return self._handlers.get(event_type)

    def _discard(self, entry: Listener) -> None:
        listeners = self._listeners(entry.event_type)
        if not listeners or entry not in listeners:
            return
        listeners.remove(entry)
        if entry.event_type is not WILDCARD and not listeners:
            self._handlers.pop(entry.event_type, None)


def _tag(event_type: EventKey) -> Any:
    return event_type.value if isinstance(event_type, Enum) else event_type


# Re-export for convenience
__all__ = [
    "DEFAULT_PRIORITY",
    "WILDCARD",
    "AsyncEventBus",
    "Event",
    "EventHandler",
    "EventKey",
    "FetchEvent",
    "Listener",
    "Unsubscribe",
]
