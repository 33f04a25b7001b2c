"""Core module - event bus and request/response correlation."""

from eventfetch.core.events.bus import AsyncEventBus, Event, FetchEvent
from eventfetch.core.fetch.correlator import EventFetch

__all__ = [
    "AsyncEventBus",
    "Event",
    "EventFetch",
    "FetchEvent",
]
