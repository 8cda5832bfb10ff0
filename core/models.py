from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# An item exactly as the provider returned it. Only ``id`` and
# ``metadata["tweet_id"]`` are ever inspected.
FetchedItem = dict[str, Any]


class StopReason(str, Enum):
    """Why a pagination loop ended."""

    EXHAUSTED = "exhausted"
    TARGET_REACHED = "target_reached"
    PROVIDER_ERROR = "provider_error"
    CURSOR_ERROR = "cursor_error"

    @property
    def is_error(self) -> bool:
        return self in (StopReason.PROVIDER_ERROR, StopReason.CURSOR_ERROR)


@dataclass(frozen=True)
class SearchRequest:
    """One page request sent to the provider."""

    query: str
    limit: int


@dataclass(frozen=True)
class JobSubmission:
    """The provider's reply to a submitted job."""

    uuid: str
    error: str = ""


@dataclass
class PaginationOutcome:
    """Items gathered by one pagination loop and how it ended."""

    items: list[FetchedItem]
    stop_reason: StopReason
    requests: list[SearchRequest] = field(default_factory=list)
    error: str = ""

    @property
    def requests_made(self) -> int:
        return len(self.requests)


def utc_timestamp(now: datetime | None = None) -> str:
    """RFC 3339 UTC timestamp with second precision, e.g. ``2025-01-31T12:00:00Z``."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class CollectionResult:
    """Everything collected for one query (or one trend). Written once."""

    items: tuple[FetchedItem, ...]
    source_query: str
    collected_at: str
    trend: str | None = None

    @property
    def total_count(self) -> int:
        return len(self.items)

    @classmethod
    def from_outcome(
        cls,
        outcome: PaginationOutcome,
        query: str,
        trend: str | None = None,
        now: datetime | None = None,
    ) -> CollectionResult:
        return cls(
            items=tuple(outcome.items),
            source_query=query,
            collected_at=utc_timestamp(now),
            trend=trend,
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "total_tweets": self.total_count,
            "query": self.source_query,
        }
        if self.trend is not None:
            payload["trend"] = self.trend
        payload["collected_at"] = self.collected_at
        payload["tweets"] = list(self.items)
        return payload


@dataclass
class TopicReport:
    """Outcome of collecting a single query or trend."""

    label: str
    query: str
    output_path: str = ""
    stop_reason: StopReason | None = None
    item_count: int = 0
    requests_made: int = 0
    error: str = ""

    @property
    def status(self) -> str:
        if self.stop_reason is None:
            return "failed"
        if self.stop_reason.is_error:
            return "partial" if self.item_count else "failed"
        return "success"


@dataclass
class BatchResult:
    """Outcome of a multi-topic run."""

    reports: list[TopicReport] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> list[TopicReport]:
        return [r for r in self.reports if r.status != "failed"]
