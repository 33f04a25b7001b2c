"""Global test fixtures for eventfetch."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any

import pytest

from eventfetch.core.config import FetchConfig
from eventfetch.core.events.bus import AsyncEventBus, Event


@dataclass
class Recorder:
    """Collects (label, event) pairs in invocation order."""

    calls: list[tuple[str, Event]] = field(default_factory=list)

    def handler(self, label: str):
        """Build a sync handler that records under ``label``."""

        def record(event: Event) -> None:
            self.calls.append((label, event))

        record.__name__ = f"record_{label}"
        return record

    def async_handler(self, label: str):
        """Build an async handler that records under ``label``."""

        async def record(event: Event) -> None:
            self.calls.append((label, event))

        record.__name__ = f"record_{label}"
        return record

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.calls]

    @property
    def tags(self) -> list[Hashable]:
        return [event.type for _, event in self.calls]

    def data(self) -> list[Any]:
        return [event.data for _, event in self.calls]


@pytest.fixture
def bus() -> AsyncEventBus:
    """Fresh event bus."""
    return AsyncEventBus()


@pytest.fixture
def recorder() -> Recorder:
    """Fresh invocation recorder."""
    return Recorder()


@pytest.fixture
def fast_config() -> FetchConfig:
    """Config with a short default timeout for correlator tests."""
    return FetchConfig(default_timeout=0.05)
