"""Event type definitions."""

from enum import Enum


class FetchEvent(str, Enum):
    """Event keys reserved by the request/response layer."""

    REQUEST = "EventFetch:Fetch:Request"
    RESPONSE = "EventFetch:Fetch:Response"
