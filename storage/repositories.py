from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.models import TopicReport
from storage.database import get_session, init_db
from storage.schema import DBCollectionRun

log = logging.getLogger(__name__)


class RunLogRepository:
    """Ledger of every query/trend collection, one row per output file."""

    def __init__(self, factory: sessionmaker[Session]) -> None:
        self._factory = factory

    @classmethod
    def from_url(cls, url: str) -> RunLogRepository | None:
        """Open the ledger at ``url``; ``None`` when disabled or unusable."""
        if not url:
            return None
        try:
            return cls(init_db(url))
        except SQLAlchemyError as e:
            log.error("Run log unavailable at %s, continuing without it: %s", url, e)
            return None

    def log_run(
        self,
        report: TopicReport,
        *,
        trend: str | None,
        duration_seconds: float,
        started_at: datetime,
    ) -> None:
        """Record one collection. Ledger failures are logged, never raised."""
        row = DBCollectionRun(
            query=report.query,
            trend=trend,
            status=report.status,
            stop_reason=report.stop_reason.value if report.stop_reason else None,
            items_collected=report.item_count,
            requests_made=report.requests_made,
            error_message=report.error[:500],
            output_path=report.output_path,
            duration_seconds=duration_seconds,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )
        try:
            with get_session(self._factory) as session:
                session.add(row)
        except SQLAlchemyError as e:
            log.error("Failed to record run for '%s': %s", report.query, e)

    def recent_runs(self, limit: int = 20) -> list[DBCollectionRun]:
        with get_session(self._factory) as session:
            q = (
                select(DBCollectionRun)
                .order_by(DBCollectionRun.started_at.desc(), DBCollectionRun.id.desc())
                .limit(limit)
            )
            return list(session.scalars(q).all())
