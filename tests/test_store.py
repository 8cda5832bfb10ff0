import json
from datetime import datetime, timezone

import pytest

from core.exceptions import StorageError
from core.models import CollectionResult, PaginationOutcome, StopReason, utc_timestamp
from storage.store import write_collection

NOW = datetime(2025, 3, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)


def make_result(trend=None) -> CollectionResult:
    outcome = PaginationOutcome(
        items=[{"id": "2", "content": "café ☕"}, {"id": "1"}],
        stop_reason=StopReason.EXHAUSTED,
    )
    return CollectionResult.from_outcome(outcome, "coffee min_faves:10", trend=trend, now=NOW)


def test_query_payload(tmp_path):
    path = write_collection(tmp_path / "nested" / "out.json", make_result())

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {
        "total_tweets": 2,
        "query": "coffee min_faves:10",
        "collected_at": "2025-03-01T12:30:45Z",
        "tweets": [{"id": "2", "content": "café ☕"}, {"id": "1"}],
    }
    assert "café ☕" in path.read_text(encoding="utf-8")
    assert not list(path.parent.glob(".*.tmp"))


def test_trend_payload_has_trend_label(tmp_path):
    path = write_collection(tmp_path / "t.json", make_result(trend="Coffee"))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert list(data) == ["total_tweets", "query", "trend", "collected_at", "tweets"]
    assert data["trend"] == "Coffee"


def test_unwritable_directory_raises_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(StorageError):
        write_collection(blocker / "out.json", make_result())


def test_result_is_immutable():
    result = make_result()
    with pytest.raises(AttributeError):
        result.source_query = "other"


def test_utc_timestamp_converts_offsets():
    from datetime import timedelta

    local = datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone(timedelta(hours=9)))
    assert utc_timestamp(local) == "2025-01-01T00:00:00Z"
