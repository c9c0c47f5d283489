# src/cli/runner.py

"""Headless CLI runner for the scheduled price monitor."""

import logging
from datetime import date, datetime

from rich.console import Console
from rich.table import Table

from src.config.settings import MonitorConfig, Settings
from src.exceptions import PriceMonitorError
from src.models.price_delta import PriceDelta
from src.models.price_snapshot import Snapshot
from src.services.notifier import LogNotifier
from src.services.price_monitor import PriceMonitor, RunOutcome
from src.storage.blob_store import FileBlobStore
from src.storage.history_store import HistoryRepository

logger = logging.getLogger("price_monitor.cli")

# Stderr console for status messages so stdout stays clean for tables
_err = Console(stderr=True)


def parse_reference_date(raw: str | None) -> date | None:
    """Parse a ``YYYY-MM-DD`` argument; ``None`` means today."""
    if raw is None:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        _err.print(f"[red]Invalid date: {raw} (expected YYYY-MM-DD)[/red]")
        raise SystemExit(2) from None


def _print_deltas(deltas: list[PriceDelta]) -> None:
    """Render a Rich table of detected price changes to stdout."""
    table = Table(
        title="Price Changes",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Product", max_width=60)
    table.add_column("Old", justify="right", style="dim")
    table.add_column("New", justify="right", style="green")
    table.add_column("Change", justify="right")

    for d in deltas:
        change = d.new_price - d.old_price
        style = "red" if change > 0 else "green"
        table.add_row(
            d.product_name,
            f"{d.old_price:,.2f}",
            f"{d.new_price:,.2f}",
            f"[{style}]{change:+,.2f}[/{style}]",
        )

    Console().print(table)


def _print_prices(snapshot: Snapshot, day: date) -> None:
    """Render a Rich table of one day's recorded prices to stdout."""
    table = Table(
        title=f"Prices on {day.isoformat()}",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Product", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Observed", style="dim")

    for idx, (name, point) in enumerate(sorted(snapshot.items()), 1):
        table.add_row(
            str(idx),
            name,
            f"{point.price:,.2f}",
            point.observed_at.isoformat(timespec="seconds"),
        )

    Console().print(table)


def _report(outcome: RunOutcome) -> None:
    """Summarise a run on stderr (and deltas on stdout)."""
    if not outcome.succeeded:
        _err.print(f"[red]Run failed: {outcome.fatal_error}[/red]")
        if outcome.history_saved:
            _err.print("[dim]History was saved before the failure.[/dim]")
        return

    _err.print(
        f"[green]✓ {outcome.product_count} products recorded"
        f" for {outcome.reference_date.isoformat()}[/green]"
    )
    if outcome.deltas:
        _print_deltas(outcome.deltas)
    else:
        _err.print("[dim]No price changes.[/dim]")
    if outcome.digest is not None:
        _err.print(
            f"[dim]Weekly report: {len(outcome.digest.series)} products,"
            f" {outcome.digest.period_start.isoformat()} to"
            f" {outcome.digest.last_included_day.isoformat()}[/dim]"
        )
    if outcome.export_path is not None:
        _err.print(f"[dim]Published → {outcome.export_path}[/dim]")
    if outcome.chart_path is not None:
        _err.print(f"[dim]Chart → {outcome.chart_path}[/dim]")
    for error_msg in outcome.errors:
        _err.print(f"[yellow]Warning: {error_msg}[/yellow]")


def run_monitor(
    config: MonitorConfig,
    reference_date: date | None = None,
    force_digest: bool = False,
    notify: bool = True,
) -> int:
    """Run one monitoring pass and return an exit code (0=ok, 1=fail)."""
    monitor = PriceMonitor(
        config,
        notifier=None if notify else LogNotifier(),
    )
    try:
        outcome = monitor.run(
            reference_date=reference_date,
            force_digest=force_digest,
        )
    finally:
        monitor.close()

    _report(outcome)
    return outcome.exit_code


def show_latest(config: MonitorConfig) -> int:
    """Print the most recently recorded prices without fetching."""
    if not config.data_dir.is_dir():
        _err.print("[yellow]No price history recorded yet.[/yellow]")
        return 0
    repository = HistoryRepository(
        FileBlobStore(config.data_dir), Settings.HISTORY_FILE,
    )
    try:
        store = repository.load()
    except PriceMonitorError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1

    latest = store.latest_date()
    if latest is None:
        _err.print("[yellow]No price history recorded yet.[/yellow]")
        return 0
    _print_prices(store.snapshot_on(latest) or {}, latest)
    return 0


def run_publish(config: MonitorConfig, chart: bool = True) -> int:
    """Re-publish the dataset (and chart) from stored history."""
    from dataclasses import replace

    monitor = PriceMonitor(
        replace(config, publish_chart=chart), notifier=LogNotifier(),
    )
    outcome = RunOutcome(reference_date=date.today())
    try:
        store = monitor.history.load()
        monitor.publish(store, datetime.now().astimezone(), outcome)
    except PriceMonitorError as exc:
        logger.error("Publish failed: %s", exc, exc_info=True)
        _err.print(f"[red]Publish failed: {exc}[/red]")
        return 1
    finally:
        monitor.close()

    _err.print(f"[green]✓ Published → {outcome.export_path}[/green]")
    if outcome.chart_path is not None:
        _err.print(f"[dim]Chart → {outcome.chart_path}[/dim]")
    return 0
