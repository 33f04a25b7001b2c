"""Error types raised by the fetch layer."""

from __future__ import annotations

from typing import Any


class EventFetchError(Exception):
    """Base class for structured fetch errors."""

    code: str = "ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Convert to the ``{code, message}`` rejection shape."""
        return {"code": self.code, "message": self.message}


class FetchTimeoutError(EventFetchError, TimeoutError):
    """Raised when no matching response arrives before the call times out."""

    code = "TIMEOUT"

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        api_key: str | None = None,
        request_id: str | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(message)
        self.api_key = api_key
        self.request_id = request_id
        self.timeout = timeout


class ContractError(EventFetchError):
    """Raised when a payload does not match its registered API contract."""

    code = "CONTRACT"
