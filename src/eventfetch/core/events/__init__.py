"""Event system for decoupled communication."""

from eventfetch.core.events.bus import (
    DEFAULT_PRIORITY,
    WILDCARD,
    AsyncEventBus,
    Event,
    FetchEvent,
    Listener,
)
from eventfetch.core.events.handlers import EventHandler, LoggingHandler

__all__ = [
    "DEFAULT_PRIORITY",
    "WILDCARD",
    "AsyncEventBus",
    "Event",
    "EventHandler",
    "FetchEvent",
    "Listener",
    "LoggingHandler",
]
