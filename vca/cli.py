"""CLI entry-point: channel analytics aggregation and job polling."""

import asyncio
import json
from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from vca.analytics import AggregationMatrix, DateRange, KeywordGroup, ResultCache
from vca.analytics.discovery import ContentDiscovery
from vca.analytics.engine import AggregationEngine
from vca.analytics.models import duplicate_labels
from vca.config import get_settings
from vca.errors import JobFailedError, JobNotFoundError, JobPollingTimeout
from vca.jobs import JobExecutor, JobRegistry, JobsClient, poll_until_complete, registry_fetcher
from vca.quota import QuotaLedger
from vca.youtube import GoogleVideoProvider

app = typer.Typer(help="Video content assistant: channel analytics and background jobs")

# Replaced in tests with an in-memory provider factory.
provider_factory = GoogleVideoProvider.from_access_token


def parse_group(value: str) -> KeywordGroup:
    """``name=keyword``; a bare ``name`` means every video on the channel."""
    name, _, keyword = value.partition("=")
    if not name.strip():
        raise typer.BadParameter(f"Group needs a name: {value!r}")
    return KeywordGroup(name=name.strip(), keyword=keyword.strip())


def parse_range(value: str) -> DateRange:
    """``label:YYYY-MM-DD:YYYY-MM-DD``."""
    parts = value.split(":")
    if len(parts) != 3:
        raise typer.BadParameter(f"Expected label:start:end, got {value!r}")
    label, start, end = parts
    try:
        return DateRange(label=label, start_date=date.fromisoformat(start), end_date=date.fromisoformat(end))
    except ValueError as e:
        raise typer.BadParameter(str(e))


def render_matrix(matrix: AggregationMatrix) -> Table:
    table = Table(title=f"Channel analytics (country: {matrix.channel_country})")
    table.add_column("Group")
    table.add_column("Videos", justify="right")
    for column in matrix.columns:
        table.add_column(column, justify="right")
    for row in matrix.rows:
        cells = []
        for column in matrix.columns:
            cell = row.cells.get(column)
            if cell is None:
                cells.append("-")
            elif cell.error:
                cells.append(f"[red]{cell.error_kind or 'error'}[/red]")
            else:
                m = cell.metrics
                cells.append(f"{m.views:,} views\n{m.average_view_percentage:.1f}% avg viewed")
        table.add_row(row.name, str(row.item_count), *cells)
    return table


async def _run_aggregation(access_token, channel_id, groups, ranges, console):
    settings = get_settings()
    provider = provider_factory(access_token)
    ledger = QuotaLedger()
    engine = AggregationEngine(
        provider,
        ledger,
        ResultCache(ttl_seconds=settings.analytics_cache_ttl_seconds),
        discovery=ContentDiscovery(
            provider,
            ledger,
            page_size=settings.discovery_page_size,
            max_pages=settings.discovery_max_pages,
            max_items=settings.discovery_max_items,
        ),
        chunk_size=settings.analytics_chunk_size,
    )
    registry = JobRegistry(retention_seconds=settings.job_retention_seconds)
    executor = JobExecutor(registry, max_concurrency=1)

    async def work(job_id: str):
        def on_progress(percent: int, message: str) -> None:
            registry.update_progress(job_id, percent, message)

        matrix = await engine.aggregate(channel_id, groups, ranges, on_progress)
        return matrix.model_dump(mode="json")

    job_id = executor.execute_job("channel-analytics", work)
    result = await poll_until_complete(
        registry_fetcher(registry),
        job_id,
        interval=0.2,
        timeout=settings.poll_timeout_seconds,
        on_progress=lambda percent, message: console.print(f"[{percent:3d}%] {message}"),
    )
    return AggregationMatrix.model_validate(result)


@app.command()
def aggregate(
    channel_id: str = typer.Option(..., "--channel-id", help="YouTube channel id"),
    access_token: str = typer.Option(..., "--access-token", envvar="YOUTUBE_ACCESS_TOKEN", help="OAuth access token"),
    group: list[str] = typer.Option(..., "--group", help="Keyword group as name=keyword (repeatable)"),
    date_range: list[str] = typer.Option(..., "--range", help="Date range as label:start:end (repeatable)"),
    output: str = typer.Option(None, help="Write the matrix as JSON to this path"),
):
    """Aggregate analytics per keyword group and date range for one channel."""
    console = Console()
    groups = [parse_group(g) for g in group]
    ranges = [parse_range(r) for r in date_range]
    duplicates = duplicate_labels(ranges)
    if duplicates:
        raise typer.BadParameter(f"Duplicate range label(s): {', '.join(duplicates)}", param_hint="--range")

    try:
        matrix = asyncio.run(_run_aggregation(access_token, channel_id, groups, ranges, console))
    except (JobFailedError, JobPollingTimeout) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(render_matrix(matrix))
    console.print(f"Quota units used: {matrix.quota_units}")
    if output:
        Path(output).write_text(matrix.model_dump_json(indent=2), encoding="utf-8")
        console.print(f"Wrote {output}")
    console.print("[green]Done.[/green]")


@app.command("wait-job")
def wait_job(
    job_id: str = typer.Argument(..., help="Job id returned by the server"),
    base_url: str = typer.Option("http://localhost:8000/api", help="Backend API base URL"),
    interval: float = typer.Option(None, help="Seconds between polls (default from env)"),
    timeout: float = typer.Option(None, help="Give up after this many seconds (default from env)"),
):
    """Poll a job on a running backend until it completes or fails."""
    console = Console()
    settings = get_settings()

    async def run():
        async with JobsClient(base_url) as client:
            return await client.wait(
                job_id,
                interval=interval or settings.poll_interval_seconds,
                timeout=timeout or settings.poll_timeout_seconds,
                on_progress=lambda percent, message: console.print(f"[{percent:3d}%] {message}"),
            )

    try:
        result = asyncio.run(run())
    except JobNotFoundError:
        console.print(f"[red]Error: job not found: {job_id}[/red]")
        raise typer.Exit(1)
    except JobFailedError as e:
        console.print(f"[red]Job failed: {e}[/red]")
        raise typer.Exit(1)
    except JobPollingTimeout as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(2)

    console.print_json(json.dumps(result, default=str))
    console.print("[green]Done.[/green]")


if __name__ == "__main__":
    app()
