"""In-process event bus with request/response calls layered on top."""

from eventfetch.core.config import FetchConfig, LogConfig
from eventfetch.core.errors import ContractError, EventFetchError, FetchTimeoutError
from eventfetch.core.events import (
    DEFAULT_PRIORITY,
    WILDCARD,
    AsyncEventBus,
    Event,
    EventHandler,
    FetchEvent,
    LoggingHandler,
)
from eventfetch.core.fetch import (
    NO_ANSWER,
    ApiRegistry,
    EventFetch,
    RequestEnvelope,
    ResponseEnvelope,
)
from eventfetch.core.logging_utils import configure_logging

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PRIORITY",
    "NO_ANSWER",
    "WILDCARD",
    "ApiRegistry",
    "AsyncEventBus",
    "ContractError",
    "Event",
    "EventFetch",
    "EventFetchError",
    "EventHandler",
    "FetchConfig",
    "FetchEvent",
    "FetchTimeoutError",
    "LogConfig",
    "LoggingHandler",
    "RequestEnvelope",
    "ResponseEnvelope",
    "configure_logging",
]
