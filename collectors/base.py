from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any

from core.models import FetchedItem, JobSubmission


class SearchProvider(ABC):
    """What the collector needs from a hosted search API."""

    @abstractmethod
    def search(self, query: str, max_results: int) -> list[FetchedItem]:
        """Run a query and block until its results are available."""
        ...

    @abstractmethod
    def submit_job(self, arguments: dict[str, Any]) -> JobSubmission:
        """Queue a job without waiting for it."""
        ...

    @abstractmethod
    def wait_for_job(self, uuid: str) -> list[FetchedItem]:
        """Block until a queued job finishes and return its documents."""
        ...


class RateLimiter:
    """Fixed delay between requests, measured from when the last one finished."""

    def __init__(self, delay_seconds: float = 1.0, sleep=time.sleep, clock=time.monotonic) -> None:
        self._delay = delay_seconds
        self._sleep = sleep
        self._clock = clock
        self._last_request: float | None = None

    def wait(self) -> None:
        if self._last_request is not None:
            elapsed = self._clock() - self._last_request
            if elapsed < self._delay:
                self._sleep(self._delay - elapsed)
        self._last_request = self._clock()

    def mark(self) -> None:
        """Restart the interval; call once a blocking request has returned."""
        self._last_request = self._clock()
