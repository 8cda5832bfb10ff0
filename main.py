"""Tweet collector — entry point."""

from __future__ import annotations

import logging
import sys

import click

from collectors.gopher import GopherClient
from collectors.runner import CollectionRunner
from config.settings import Settings, load_settings
from core.exceptions import ConfigurationError, StorageError, TrendsError
from storage.repositories import RunLogRepository

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

log = logging.getLogger("main")


def _configure(**overrides) -> Settings:
    """Load settings, apply the log level, or exit 1 on bad configuration."""
    try:
        settings = load_settings(**{k: v for k, v in overrides.items() if v is not None})
    except ConfigurationError as e:
        log.error("%s", e)
        sys.exit(1)
    logging.getLogger().setLevel(settings.LOG_LEVEL)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return settings


def _build_runner(settings: Settings, client: GopherClient) -> CollectionRunner:
    return CollectionRunner(
        client,
        settings,
        run_log=RunLogRepository.from_url(settings.RUN_LOG_URL),
    )


@click.group()
def cli() -> None:
    """Collect tweets from the Gopher data API into JSON files."""
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)


@cli.command()
@click.option("--query", default=None, help="Search query (overrides QUERY).")
@click.option("--amount", default=None, type=str, help="Target tweet count (overrides AMOUNT).")
def tweets(query: str | None, amount: str | None) -> None:
    """Collect tweets for a single query."""
    settings = _configure(QUERY=query, AMOUNT=amount)

    with GopherClient.from_settings(settings) as client:
        runner = _build_runner(settings, client)
        try:
            report = runner.collect_query(settings.QUERY, settings.AMOUNT)
        except StorageError as e:
            log.error("Failed to save tweets: %s", e)
            sys.exit(1)

    log.info(
        "Successfully collected and saved %d tweets to %s",
        report.item_count,
        report.output_path,
    )


@cli.command()
@click.option("--amount", default=None, type=str, help="Target tweet count per trend (overrides AMOUNT).")
def trends(amount: str | None) -> None:
    """Collect tweets for every currently trending topic."""
    settings = _configure(AMOUNT=amount)

    with GopherClient.from_settings(settings) as client:
        runner = _build_runner(settings, client)
        try:
            result = runner.collect_trends(settings.AMOUNT)
        except TrendsError as e:
            log.error("Failed to fetch trends: %s", e)
            sys.exit(1)

    for report in result.reports:
        click.echo(
            f"{report.status:<8} {report.item_count:>6}  {report.label}  {report.output_path or report.error}"
        )


@cli.command()
@click.option("--limit", default=20, show_default=True, type=click.IntRange(min=1))
def runs(limit: int) -> None:
    """Show the most recent collections from the run ledger."""
    try:
        settings = Settings()
    except ValueError as e:
        log.error("Invalid configuration: %s", e)
        sys.exit(1)
    repo = RunLogRepository.from_url(settings.RUN_LOG_URL)
    if repo is None:
        log.error("The run ledger is disabled or unavailable (RUN_LOG_URL=%r)", settings.RUN_LOG_URL)
        sys.exit(1)

    for run in repo.recent_runs(limit):
        click.echo(
            f"{run.started_at:%Y-%m-%d %H:%M:%S}  {run.status:<8} "
            f"{run.items_collected:>6}  {run.trend or run.query}  {run.output_path or run.error_message}"
        )


if __name__ == "__main__":
    cli()
