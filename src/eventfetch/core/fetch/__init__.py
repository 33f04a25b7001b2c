"""Request/response calls over the event bus."""

from eventfetch.core.fetch.contracts import ApiContract, ApiRegistry
from eventfetch.core.fetch.correlator import NO_ANSWER, EventFetch
from eventfetch.core.fetch.envelopes import (
    EnvelopeHeader,
    RequestEnvelope,
    RequestUserInfo,
    ResponseEnvelope,
    ResponseUserInfo,
)

__all__ = [
    "NO_ANSWER",
    "ApiContract",
    "ApiRegistry",
    "EnvelopeHeader",
    "EventFetch",
    "RequestEnvelope",
    "RequestUserInfo",
    "ResponseEnvelope",
    "ResponseUserInfo",
]
