"""Request/response correlation on top of the async event bus."""

from __future__ import annotations

import asyncio
import inspect
import random
import string
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Union

import structlog
from pydantic import ValidationError

from eventfetch.core.config import FetchConfig
from eventfetch.core.errors import FetchTimeoutError
from eventfetch.core.events.bus import AsyncEventBus, Event, Unsubscribe
from eventfetch.core.events.types import FetchEvent
from eventfetch.core.fetch.contracts import ApiRegistry
from eventfetch.core.fetch.envelopes import (
    Envelope,
    EnvelopeHeader,
    RequestEnvelope,
    RequestUserInfo,
    ResponseEnvelope,
    ResponseUserInfo,
)

logger = structlog.get_logger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


class _NoAnswer:
    """Sentinel a responder returns to send no response at all."""

    _instance: _NoAnswer | None = None

    def __new__(cls) -> _NoAnswer:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_ANSWER"


NO_ANSWER = _NoAnswer()

Responder = Callable[[RequestEnvelope], Union[Any, Awaitable[Any]]]


def random_id(prefix: str, length: int = 13) -> str:
    """Generate a prefixed base36 identifier."""
    return prefix + "".join(random.choices(_ID_ALPHABET, k=length))


class EventFetch:
    """
    Typed call/response protocol over an :class:`AsyncEventBus`.

    Requests go out on ``FetchEvent.REQUEST`` and answers come back on
    ``FetchEvent.RESPONSE``. Each call carries a fresh request id; the
    instance keeps a registry of pending calls keyed by that id and resolves
    each one exactly once, either with the matching response or with a
    :class:`FetchTimeoutError`.

    Instances sharing one bus can call each other by ``self_id``.
    """

    def __init__(
        self,
        self_id: str | None = None,
        *,
        bus: AsyncEventBus | None = None,
        config: FetchConfig | None = None,
        registry: ApiRegistry | None = None,
    ) -> None:
        """
        Initialize the correlator.

        Args:
            self_id: Identity of this instance (generated when omitted)
            bus: Bus to communicate over (a private one when omitted)
            config: Timeout, priority and id settings
            registry: Optional API contracts to validate params and results
        """
        self.config = config or FetchConfig()
        self._self_id = self_id if self_id is not None else random_id(self.config.self_id_prefix)
        self._bus = bus or AsyncEventBus(default_priority=self.config.default_priority)
        self._registry = registry
        self._pending: dict[str, Callable[[ResponseEnvelope], None]] = {}
        self._responders: list[Unsubscribe] = []
        self._detached: set[asyncio.Task[Any]] = set()

        self._close_response = self._bus.subscribe(FetchEvent.RESPONSE, self._on_response)
        logger.debug("EventFetch created", self_id=self._self_id)

    @property
    def self_id(self) -> str:
        return self._self_id

    @property
    def bus(self) -> AsyncEventBus:
        return self._bus

    @property
    def pending_count(self) -> int:
        """Number of calls still waiting for a response."""
        return len(self._pending)

    def is_pending(self, request_id: str) -> bool:
        return request_id in self._pending

    async def call(
        self,
        api_key: str,
        params: Any = None,
        target_id: str | None = None,
        timeout: float | None = None,
    ) -> ResponseEnvelope:
        """
        Call an API and wait for its response.

        Args:
            api_key: API to call
            params: Request payload
            target_id: Identity of the responder (defaults to self)
            timeout: Seconds to wait for the response (defaults to config)

        Returns:
            The matching response envelope

        Raises:
            FetchTimeoutError: If no matching response arrives in time
            Exception: Any exception raised by a request listener before the
                response arrived
        """
        target_id = self._self_id if target_id is None else target_id
        timeout = self.config.default_timeout if timeout is None else timeout
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        if self._registry is not None:
            params = self._registry.validate_params(api_key, params)

        loop = asyncio.get_running_loop()
        request_id = self._create_request_id()
        future: asyncio.Future[ResponseEnvelope] = loop.create_future()

        def resolve(response: ResponseEnvelope) -> None:
            # Is this the current request
            if response.request_id != request_id:
                return
            # Did the addressed target answer
            if response.user_info.replier_id != target_id:
                return
            # Was the request sent by us
            if response.user_info.requester_id != self._self_id:
                return

            self._pending.pop(request_id, None)
            if not future.done():
                future.set_result(response)

        self._pending[request_id] = resolve

        request = RequestEnvelope(
            data=params,
            header=EnvelopeHeader(request_id=request_id, api_key=api_key),
            user_info=RequestUserInfo(requester_id=self._self_id, remote_id=target_id),
        )
        logger.debug(
            "Sending request",
            api_key=api_key,
            request_id=request_id,
            target_id=target_id,
        )

        # The timer races the response only, not the request listener chain
        dispatch = asyncio.create_task(
            self._bus.fire(FetchEvent.REQUEST, request, source=self._self_id)
        )
        deadline = loop.time() + timeout
        waiting: set[asyncio.Future[Any]] = {future, dispatch}
        propagated = False

        try:
            while not future.done():
                remaining = deadline - loop.time()
                if remaining <= 0:
                    logger.info(
                        "Request timed out",
                        api_key=api_key,
                        request_id=request_id,
                        target_id=target_id,
                        timeout=timeout,
                    )
                    raise FetchTimeoutError(
                        api_key=api_key, request_id=request_id, timeout=timeout
                    )
                done, _ = await asyncio.wait(
                    waiting, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )
                if dispatch in done and not future.done():
                    # Request listener failure propagates to the caller
                    propagated = dispatch.exception() is not None
                    dispatch.result()
                    waiting = {future}
            return future.result()
        finally:
            self._pending.pop(request_id, None)
            if not future.done():
                future.cancel()
            if not propagated:
                self._watch(dispatch)

    def respond(
        self,
        api_key: str,
        handler: Responder,
        *,
        priority: int | None = None,
    ) -> Unsubscribe:
        """
        Answer requests for an API addressed to this instance.

        The handler receives the request envelope and returns the response
        payload (or an awaitable of it). Returning ``NO_ANSWER``, ``None`` or
        ``False`` (and any falsy value while ``config.falsy_is_no_answer``
        is set) sends no response, leaving the caller to time out.

        Args:
            api_key: API to answer
            handler: Sync or async responder function
            priority: Listener priority on the request event

        Returns:
            Function that detaches this responder
        """

        async def on_request(event: Event) -> None:
            request = self._coerce(RequestEnvelope, event.data)
            if request is None:
                return
            # Is this a registered API
            if request.api_key != api_key:
                return
            # Are we the addressed target
            if request.user_info.remote_id != self._self_id:
                return

            result = handler(request)
            if inspect.isawaitable(result):
                result = await result

            if self._is_no_answer(result):
                logger.debug(
                    "Responder declined to answer",
                    api_key=api_key,
                    request_id=request.request_id,
                )
                return
            if self._registry is not None:
                result = self._registry.validate_result(api_key, result)

            response = ResponseEnvelope(
                data=result,
                header=EnvelopeHeader(request_id=request.request_id, api_key=request.api_key),
                user_info=ResponseUserInfo(
                    requester_id=request.user_info.requester_id,
                    replier_id=self._self_id,
                ),
            )
            await self._bus.fire(FetchEvent.RESPONSE, response, source=self._self_id)

        unsubscribe = self._bus.subscribe(FetchEvent.REQUEST, on_request, priority=priority)
        self._responders.append(unsubscribe)

        def detach() -> None:
            unsubscribe()
            if unsubscribe in self._responders:
                self._responders.remove(unsubscribe)

        return detach

    def close(self) -> None:
        """Detach the response listener and every responder of this instance.

        Calls still pending afterwards can only end by timing out.
        """
        self._close_response()
        while self._responders:
            self._responders.pop()()
        logger.debug("EventFetch closed", self_id=self._self_id, pending=len(self._pending))

    def _on_response(self, event: Event) -> None:
        response = self._coerce(ResponseEnvelope, event.data)
        if response is None:
            return
        resolver = self._pending.get(response.request_id)
        if resolver is not None:
            resolver(response)

    def _is_no_answer(self, result: Any) -> bool:
        if result is None or result is NO_ANSWER or result is False:
            return True
        return self.config.falsy_is_no_answer and not result

    def _create_request_id(self) -> str:
        return random_id(self.config.request_id_prefix)

    def _coerce(self, model: type[Envelope], payload: Any) -> Any:
        """Accept an envelope instance or its wire-shaped mapping."""
        if isinstance(payload, model):
            return payload
        if isinstance(payload, Mapping):
            try:
                return model.from_wire(payload)
            except ValidationError as e:
                logger.warning(
                    "Dropping malformed envelope",
                    envelope=model.__name__,
                    errors=e.error_count(),
                )
                return None
        logger.warning(
            "Dropping unexpected payload",
            envelope=model.__name__,
            payload_type=type(payload).__name__,
        )
        return None

    def _watch(self, dispatch: asyncio.Task[Any]) -> None:
        """Keep request dispatch that outlives its call, and report its failure."""
        if dispatch.done():
            self._on_dispatch_done(dispatch)
            return
        self._detached.add(dispatch)
        dispatch.add_done_callback(self._on_dispatch_done)

    def _on_dispatch_done(self, dispatch: asyncio.Task[Any]) -> None:
        self._detached.discard(dispatch)
        if dispatch.cancelled():
            return
        error = dispatch.exception()
        if error is not None:
            logger.warning(
                "Request listener failed after call settled",
                error=str(error),
                error_type=type(error).__name__,
            )

    def __repr__(self) -> str:
        return f"EventFetch(self_id={self._self_id!r}, pending={len(self._pending)})"
