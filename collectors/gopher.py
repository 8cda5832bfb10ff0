"""Gopher data API client using httpx.

Every search is a job: it is submitted, then its result endpoint is polled
until the documents are ready.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from collectors.base import SearchProvider
from config.settings import Settings
from core.exceptions import ProviderError
from core.models import FetchedItem, JobSubmission

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://data.gopher-ai.com/api/v1"
SEARCH_PATH = "/search/live/twitter"
RESULT_PATH = "/search/live/twitter/result/{uuid}"

SEARCH_BY_QUERY = "searchbyquery"
GET_TRENDS = "gettrends"


class GopherClient(SearchProvider):
    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        poll_interval: float = 1.0,
        max_wait: float = 300.0,
        transport: httpx.BaseTransport | None = None,
        sleep=time.sleep,
    ) -> None:
        self._poll_interval = poll_interval
        self._max_wait = max_wait
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "User-Agent": "tweet-collector/0.1",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> GopherClient:
        return cls(
            token=settings.GOPHER_CLIENT_TOKEN,
            base_url=settings.GOPHER_CLIENT_URL,
            timeout=settings.GOPHER_CLIENT_TIMEOUT,
            poll_interval=settings.JOB_POLL_INTERVAL,
            max_wait=settings.JOB_MAX_WAIT,
            **kwargs,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GopherClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── SearchProvider ───────────────────────────────────────────────

    def search(self, query: str, max_results: int) -> list[FetchedItem]:
        job = self.submit_job(
            {"type": SEARCH_BY_QUERY, "query": query, "max_results": max_results}
        )
        if job.error:
            raise ProviderError(f"search job error: {job.error}")
        if not job.uuid:
            raise ProviderError("search job returned no job ID")
        return self.wait_for_job(job.uuid)

    def submit_job(self, arguments: dict[str, Any]) -> JobSubmission:
        data = self._request(
            "POST", SEARCH_PATH, json={"type": "twitter", "arguments": arguments}
        )
        if not isinstance(data, dict):
            raise ProviderError(f"unexpected job submission response: {data!r}")
        return JobSubmission(
            uuid=str(data.get("uuid") or ""),
            error=str(data.get("error") or ""),
        )

    def wait_for_job(self, uuid: str) -> list[FetchedItem]:
        deadline = time.monotonic() + self._max_wait
        path = RESULT_PATH.format(uuid=uuid)
        while True:
            response = self._send("GET", path)
            if response.status_code != httpx.codes.ACCEPTED:
                data = self._decode(response)
                if data is None:
                    return []
                if isinstance(data, list):
                    return data
                if isinstance(data, dict) and data.get("error"):
                    raise ProviderError(f"job {uuid} failed: {data['error']}")

            if time.monotonic() >= deadline:
                raise ProviderError(
                    f"timed out after {self._max_wait:.0f}s waiting for job {uuid}"
                )
            log.debug("Job %s still running, polling again", uuid)
            self._sleep(self._poll_interval)

    # ── HTTP helpers ─────────────────────────────────────────────────

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        return self._decode(self._send(method, path, **kwargs))

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ProviderError(f"{method} {path} failed: {exc}") from exc
        if response.status_code >= 400:
            raise ProviderError(response.text[:500] or response.reason_phrase, response.status_code)
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"invalid JSON from provider: {exc}") from exc
