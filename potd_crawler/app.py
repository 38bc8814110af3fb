"""Typer CLI entrypoint for potd-crawler."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Sequence

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table
from typer import BadParameter

from .config import AppConfig, ConfigRepository, ScheduleConfig, ScheduleType
from .engine import (
    BaseStore,
    ImageTransformer,
    PageFetcher,
    ResiliencePolicy,
    SQLiteStore,
    ThreadPoolManager,
    build_summarizer,
)
from .infra import SQLiteManager
from .logging_conf import configure_logging, default_log_dir, tail_log
from .models import PictureRecord, RunOutcome, RunResult
from .orchestrator import Orchestrator
from .renditions import RenditionService
from .scheduler import APSchedulerAdapter

app = typer.Typer(
    help="Wikipedia picture-of-the-day crawler and e-ink renderer.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Configuration commands.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log viewing commands.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


class ExportVariant(str, Enum):
    ORIGINAL = "original"
    DITHERED = "dithered"
    DISPLAY = "display"


@dataclass
class AppState:
    repository: ConfigRepository
    config: AppConfig
    store: BaseStore
    scheduler: APSchedulerAdapter
    orchestrator: Orchestrator
    renditions: RenditionService


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    repository = ConfigRepository()
    config = repository.load_config()
    store = SQLiteStore(SQLiteManager(), repository.storage_path())
    transformer = ImageTransformer()
    orchestrator = Orchestrator(
        config=config,
        store=store,
        fetcher=PageFetcher(timeout=config.source.timeout),
        thread_pool=ThreadPoolManager(config.thread_pool_workers),
        transformer=transformer,
        summarizer=build_summarizer(config.summarizer),
        resilience=ResiliencePolicy(config.resilience),
    )
    return AppState(
        repository=repository,
        config=config,
        store=store,
        scheduler=APSchedulerAdapter(),
        orchestrator=orchestrator,
        renditions=RenditionService(store, transformer, config.display),
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.find_root().obj
    if state is None:
        state = build_state(verbose=False)
        ctx.find_root().obj = state
    return state


def _parse_date_option(value: Optional[str], option_name: str) -> date | None:
    if value is None:
        return None
    text = value.strip()
    if not text:
        raise BadParameter(f"{option_name} must not be empty.")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise BadParameter(f"{option_name} must be an ISO date such as 2024-05-01.") from exc


def _format_schedule(schedule: ScheduleConfig) -> str:
    data = schedule.value
    label = schedule.type.value
    if data in (None, "", [], {}):
        return label
    if schedule.type is ScheduleType.CRON:
        return f"cron ({data})"
    if schedule.type is ScheduleType.INTERVAL:
        return f"interval ({data})"
    return f"{label} ({data})"


_OUTCOME_STYLES = {
    RunOutcome.SUCCESS: "green",
    RunOutcome.SKIPPED: "yellow",
    RunOutcome.FAILED: "red",
}


def _render_result_table(result: RunResult) -> Table:
    table = Table(title=f"Run {result.run_date.isoformat()}", box=box.SIMPLE_HEAD)
    table.add_column("Outcome", no_wrap=True)
    table.add_column("Reason", style="magenta")
    table.add_column("Reused", justify="center")
    table.add_column("Image URL", overflow="fold")
    table.add_row(
        f"[{_OUTCOME_STYLES[result.outcome]}]{result.outcome.value}[/]",
        result.reason or "-",
        "yes" if result.reused else "no",
        result.canonical_url or "-",
    )
    return table


def _render_record_table(record: PictureRecord) -> Table:
    table = Table(
        title=f"Picture of the day · {record.date.isoformat()}",
        box=box.MINIMAL_DOUBLE_HEAD,
        show_header=False,
        pad_edge=False,
    )
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")
    table.add_row("Summary", record.short_description)
    table.add_row("Description", record.description)
    table.add_row("Credit", record.credit or "-")
    table.add_row("Image URL", record.canonical_image_url)
    table.add_row("Original", f"{len(record.original_image)} bytes")
    table.add_row("Dithered", f"{len(record.dithered_image)} bytes")
    table.add_row("Stored at", record.created_at.isoformat())
    return table


def _render_history_table(records: Sequence[PictureRecord]) -> Table:
    table = Table(title=f"Most recent {len(records)} pictures", box=box.SIMPLE_HEAD)
    table.add_column("Date", style="green", no_wrap=True)
    table.add_column("Summary", overflow="fold")
    table.add_column("Image URL", overflow="fold", style="dim")
    for record in records:
        table.add_row(record.date.isoformat(), record.short_description, record.canonical_image_url)
    return table


def _render_jobs_table(jobs: Iterable[dict]) -> Table:
    table = Table(title="Scheduled jobs", box=box.SIMPLE_HEAD)
    table.add_column("Job ID", style="cyan", no_wrap=True)
    table.add_column("Next run", style="green")
    table.add_column("Trigger", style="magenta", overflow="fold")
    for job in jobs:
        table.add_row(
            str(job.get("id", "-")),
            str(job.get("next_run_time", "-")),
            str(job.get("trigger", "-")),
        )
    return table


app.add_typer(config_app, name="config", help="Inspect configuration.")
app.add_typer(log_app, name="log", help="View log files.")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Acquire today's picture (or the given date) once.")
def run(
    ctx: typer.Context,
    run_date: Optional[str] = typer.Option(None, "--date", help="Run date, YYYY-MM-DD."),
) -> None:
    state = _get_state(ctx)
    day = _parse_date_option(run_date, "--date")
    try:
        result = state.orchestrator.run(day)
    finally:
        state.orchestrator.close()
    console.print(_render_result_table(result))
    if result.outcome is RunOutcome.FAILED:
        raise typer.Exit(code=1)


@app.command("show", help="Show the stored picture for a date (defaults to today, else latest).")
def show(
    ctx: typer.Context,
    day: Optional[str] = typer.Argument(None, help="Date, YYYY-MM-DD."),
) -> None:
    state = _get_state(ctx)
    record = state.renditions.picture_for(_parse_date_option(day, "DATE"))
    if record is None:
        console.print("No picture stored yet.", style="yellow")
        raise typer.Exit(code=1)
    console.print(_render_record_table(record))


@app.command("history", help="List the most recently stored pictures.")
def history(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", min=1, help="Number of records to show."),
) -> None:
    state = _get_state(ctx)
    records = state.store.list_recent(limit)
    if not records:
        console.print("No history yet.", style="dim")
        return
    console.print(_render_history_table(records))


@app.command("export", help="Write an image rendition to a file.")
def export(
    ctx: typer.Context,
    day: Optional[str] = typer.Argument(None, help="Date, YYYY-MM-DD (defaults to today, else latest)."),
    variant: ExportVariant = typer.Option(ExportVariant.ORIGINAL, "--variant", help="Rendition to export."),
    width: Optional[int] = typer.Option(None, "--width", min=1, help="Target width in pixels."),
    height: Optional[int] = typer.Option(None, "--height", min=1, help="Target height in pixels."),
    output: Path = typer.Option(..., "--output", "-o", help="Destination PNG path."),
) -> None:
    state = _get_state(ctx)
    target = _parse_date_option(day, "DATE")
    try:
        if variant is ExportVariant.ORIGINAL:
            payload = state.renditions.original(target, width, height)
        elif variant is ExportVariant.DITHERED:
            payload = state.renditions.dithered(target, width, height)
        else:
            if width is not None or height is not None:
                console.print("--width/--height are ignored for the display variant.", style="dim")
            payload = state.renditions.display(target)
    finally:
        state.orchestrator.close()
    if payload is None:
        console.print("No picture stored for that date.", style="yellow")
        raise typer.Exit(code=1)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(payload)
    console.print(f"Wrote {variant.value} rendition to {output} ({len(payload)} bytes).", style="green")


@app.command("schedule", help="Start the scheduler and block until interrupted.")
def schedule(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    state.orchestrator.register_schedule(state.scheduler)
    console.print(f"Schedule: {_format_schedule(state.config.schedule)}", style="cyan")
    console.print(_render_jobs_table(state.scheduler.list_jobs()))
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("Stopping scheduler.", style="yellow")
    finally:
        state.scheduler.shutdown()
        state.orchestrator.close()


@config_app.command("show", help="Print the effective configuration.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    console.print(f"# {state.repository.locator.config_path()}", style="dim")
    console.print(
        yaml.safe_dump(state.config.model_dump(mode="json"), allow_unicode=True, sort_keys=False),
        highlight=False,
    )


@log_app.command("show", help="Show the latest application log lines.")
def log_show(
    tail: int = typer.Option(100, "--tail", min=1, help="Show the last N lines."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log instead.", is_flag=True),
) -> None:
    path = default_log_dir() / ("error.log" if errors else "potd.log")
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log output yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} lines", style="cyan")
    console.print("".join(lines), highlight=False, markup=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
