from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from pathlib import Path

from collectors.base import RateLimiter, SearchProvider
from collectors.pagination import paginate
from collectors.trends import fetch_trends
from config.settings import Settings
from core.models import BatchResult, CollectionResult, TopicReport
from core.sanitize import build_output_path, slugify
from storage.repositories import RunLogRepository
from storage.store import write_collection

log = logging.getLogger(__name__)

TREND_FILE_PREFIX = "trend"


def trend_query(trend: str, query_filter: str) -> str:
    query = f'"{trend}"'
    query_filter = query_filter.strip()
    return f"{query} {query_filter}" if query_filter else query


class CollectionRunner:
    """Sequences pagination, persistence and the run ledger."""

    def __init__(
        self,
        provider: SearchProvider,
        settings: Settings,
        run_log: RunLogRepository | None = None,
        limiter: RateLimiter | None = None,
    ) -> None:
        self._provider = provider
        self._settings = settings
        self._run_log = run_log
        self._limiter = limiter or RateLimiter(settings.REQUEST_DELAY)

    def collect_query(self, query: str, target: int) -> TopicReport:
        """Single-query mode. A write failure propagates to the caller."""
        path = build_output_path(self._settings.DATA_DIR, query, target)
        log.info(
            "Starting tweet collection | query=%s | target=%d | output=%s | batch=%d",
            query,
            target,
            path,
            min(target, self._settings.API_MAX_RESULTS),
        )
        return self._collect(query, target, path)

    def collect_trends(self, target: int) -> BatchResult:
        """Trend mode: one collection per trending topic.

        Failing to fetch the trend list propagates. A failure on one topic is
        logged and recorded, and the run continues with the next topic.
        """
        start = time.monotonic()
        result = BatchResult()

        log.info("Fetching Twitter trends…")
        trends = fetch_trends(self._provider)
        log.info("Found %d trending topics: %s", len(trends), ", ".join(trends))

        for trend in trends:
            slug = slugify(trend, keep_colon=False)
            if not slug:
                log.info("Skipping trend (empty after sanitization): %s", trend)
                continue

            query = trend_query(trend, self._settings.TREND_QUERY_FILTER)
            path = build_output_path(
                self._settings.DATA_DIR,
                slug,
                target,
                prefix=TREND_FILE_PREFIX,
                keep_colon=False,
            )
            log.info("Processing trend '%s' | query=%s | output=%s", trend, query, path)
            try:
                report = self._collect(query, target, path, trend=trend)
            except Exception as e:
                msg = f"trend/{trend}: {e}"
                log.warning("Trend collection error: %s", msg)
                result.errors.append(msg)
                report = TopicReport(label=trend, query=query, error=str(e))  # ledger row written by _collect
            result.reports.append(report)

        result.duration_seconds = time.monotonic() - start
        log.info(
            "All trends processed | %d topics | %d saved | %d errors | %.1fs",
            len(result.reports),
            len(result.succeeded),
            len(result.errors),
            result.duration_seconds,
        )
        return result

    def _collect(
        self, query: str, target: int, path: Path, trend: str | None = None
    ) -> TopicReport:
        """Paginate, write and record one topic.

        Every topic gets exactly one ledger row. When anything raises, the row
        is marked failed and the exception propagates.
        """
        started_at = datetime.now(timezone.utc)
        t0 = time.monotonic()
        report = TopicReport(label=trend or query, query=query)

        try:
            outcome = paginate(
                self._provider,
                query,
                target,
                page_size=self._settings.API_MAX_RESULTS,
                limiter=self._limiter,
            )
            report.stop_reason = outcome.stop_reason
            report.item_count = len(outcome.items)
            report.requests_made = outcome.requests_made
            report.error = outcome.error
            if outcome.stop_reason.is_error:
                log.warning(
                    "Collection for '%s' stopped early (%s) with %d/%d tweets; saving partial results",
                    query,
                    outcome.stop_reason.value,
                    len(outcome.items),
                    target,
                )

            write_collection(path, CollectionResult.from_outcome(outcome, query, trend=trend))
        except Exception as e:
            report.stop_reason = None
            report.error = str(e)
            self._record(report, trend=trend, duration=time.monotonic() - t0, started_at=started_at)
            raise
        report.output_path = str(path)

        self._record(report, trend=trend, duration=time.monotonic() - t0, started_at=started_at)
        log.info(
            "Finished '%s' | %d tweets | %d requests | %s",
            report.label,
            report.item_count,
            report.requests_made,
            outcome.stop_reason.value,
        )
        return report

    def _record(
        self, report: TopicReport, *, trend: str | None, duration: float, started_at: datetime
    ) -> None:
        if self._run_log is None:
            return
        self._run_log.log_run(
            report, trend=trend, duration_seconds=duration, started_at=started_at
        )
