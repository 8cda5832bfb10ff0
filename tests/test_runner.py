import json
from pathlib import Path

import pytest

from collectors.base import RateLimiter
from collectors.runner import CollectionRunner, trend_query
from core.exceptions import ProviderError, StorageError, TrendsError
from core.models import StopReason
from storage.repositories import RunLogRepository
from fakes import FakeProvider, QueryProvider, make_tweets


def make_runner(provider, settings, run_log=None) -> CollectionRunner:
    return CollectionRunner(provider, settings, run_log=run_log, limiter=RateLimiter(0.0))


def read(path) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def test_collect_query_writes_file(settings):
    provider = FakeProvider(pages=[make_tweets(100, start_id=599), make_tweets(100, start_id=499)])
    runner = make_runner(provider, settings)

    report = runner.collect_query(" Bitcoin  MIN_FAVES:1000 ", 150)

    assert report.output_path == str(Path(settings.DATA_DIR) / "bitcoin_min_faves:1000_150.json")
    assert report.status == "success"
    data = read(report.output_path)
    assert data["total_tweets"] == 150
    assert data["query"] == " Bitcoin  MIN_FAVES:1000 "
    assert "trend" not in data
    assert len(data["tweets"]) == 150


def test_collect_query_saves_partial_results_on_provider_error(settings):
    provider = FakeProvider(pages=[make_tweets(100), ProviderError("down", status_code=503)])
    runner = make_runner(provider, settings)

    report = runner.collect_query("ai", 500)

    assert report.stop_reason is StopReason.PROVIDER_ERROR
    assert report.status == "partial"
    assert read(report.output_path)["total_tweets"] == 100


def test_collect_query_write_failure_propagates(settings):
    Path(settings.DATA_DIR).write_text("occupied")
    runner = make_runner(FakeProvider(pages=[make_tweets(5)]), settings)

    with pytest.raises(StorageError):
        runner.collect_query("ai", 5)


def test_trend_query_format():
    assert trend_query("Taylor Swift", "min_faves:100") == '"Taylor Swift" min_faves:100'
    assert trend_query("AI", "  ") == '"AI"'


def test_collect_trends_processes_each_topic(settings):
    q_btc = trend_query("#Bitcoin", settings.TREND_QUERY_FILTER)
    q_ts = trend_query("Taylor Swift", settings.TREND_QUERY_FILTER)
    provider = QueryProvider(
        {q_btc: [make_tweets(3)], q_ts: [make_tweets(2)]},
        trends=[{"id": "#Bitcoin"}, {"id": "東京"}, {"id": "Taylor Swift"}],
    )
    runner = make_runner(provider, settings)

    result = runner.collect_trends(10)

    assert [r.label for r in result.reports] == ["#Bitcoin", "Taylor Swift"]
    assert result.errors == []
    btc = read(Path(settings.DATA_DIR) / "trend_bitcoin_10.json")
    assert btc["trend"] == "#Bitcoin"
    assert btc["query"] == '"#Bitcoin" min_faves:100'
    assert btc["total_tweets"] == 3
    assert read(Path(settings.DATA_DIR) / "trend_taylor_swift_10.json")["total_tweets"] == 2


def test_one_failing_topic_does_not_stop_the_rest(settings, monkeypatch):
    provider = QueryProvider(
        {trend_query("Second", settings.TREND_QUERY_FILTER): [make_tweets(4)]},
        trends=[{"id": "First"}, {"id": "Second"}],
    )
    runner = make_runner(provider, settings)

    import collectors.runner as runner_module

    real_write = runner_module.write_collection

    def flaky_write(path, result):
        if result.trend == "First":
            raise StorageError("disk full")
        return real_write(path, result)

    monkeypatch.setattr(runner_module, "write_collection", flaky_write)

    result = runner.collect_trends(4)

    assert [r.status for r in result.reports] == ["failed", "success"]
    assert result.errors == ["trend/First: disk full"]
    assert read(Path(settings.DATA_DIR) / "trend_second_4.json")["total_tweets"] == 4


def test_trend_list_failure_propagates(settings):
    runner = make_runner(FakeProvider(trends=[]), settings)

    with pytest.raises(TrendsError):
        runner.collect_trends(10)


def test_runs_are_recorded_in_ledger(settings):
    run_log = RunLogRepository.from_url(settings.RUN_LOG_URL)
    provider = FakeProvider(pages=[make_tweets(100), ProviderError("down")])
    runner = make_runner(provider, settings, run_log=run_log)

    runner.collect_query("ai", 300)

    (run,) = run_log.recent_runs()
    assert run.query == "ai"
    assert run.trend is None
    assert run.status == "partial"
    assert run.stop_reason == "provider_error"
    assert run.items_collected == 100
    assert run.requests_made == 2
    assert run.output_path.endswith("ai_300.json")


def test_topic_that_raises_is_recorded_as_failed(settings):
    run_log = RunLogRepository.from_url(settings.RUN_LOG_URL)
    provider = QueryProvider(
        {
            trend_query("First", settings.TREND_QUERY_FILTER): [RuntimeError("boom")],
            trend_query("Second", settings.TREND_QUERY_FILTER): [make_tweets(2)],
        },
        trends=[{"id": "First"}, {"id": "Second"}],
    )
    runner = make_runner(provider, settings, run_log=run_log)

    result = runner.collect_trends(2)

    assert [(r.label, r.status) for r in result.reports] == [("First", "failed"), ("Second", "success")]
    rows = {run.trend: run for run in run_log.recent_runs()}
    assert set(rows) == {"First", "Second"}
    assert rows["First"].status == "failed"
    assert rows["First"].error_message == "boom"
    assert rows["Second"].status == "success"


def test_storage_failure_is_recorded_once(settings):
    run_log = RunLogRepository.from_url(settings.RUN_LOG_URL)
    Path(settings.DATA_DIR).write_text("occupied")
    runner = make_runner(FakeProvider(trends=[{"id": "Only"}]), settings, run_log=run_log)

    result = runner.collect_trends(5)

    assert [r.status for r in result.reports] == ["failed"]
    runs = run_log.recent_runs()
    assert [(run.trend, run.status) for run in runs] == [("Only", "failed")]
