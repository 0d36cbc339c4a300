# src/cli/runner.py

"""Headless CLI comparison runner built on the async comparator."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.errors import ValidationError
from src.models.log_entry import LogEntry, LogLevel
from src.services.comparison import ComparisonResult, ProductComparator
from src.storage.file_manager import FileManager

logger = logging.getLogger("product_compare.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_LEVEL_STYLES: dict[LogLevel, str] = {
    LogLevel.INFO: "cyan",
    LogLevel.WARN: "yellow",
    LogLevel.ERROR: "red",
}


def parse_strategy_ids(strategy_csv: str | None) -> list[str] | None:
    """Split a comma-separated id list; ``None`` means every strategy."""
    if strategy_csv is None:
        return None
    return [s.strip() for s in strategy_csv.split(",") if s.strip()]


def _print_comparison(result: ComparisonResult) -> None:
    """Render a Rich side-by-side table of both products."""
    first = result.product1.record
    second = result.product2.record
    table = Table(
        title="Product Comparison",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Attribute", style="bold")
    table.add_column(first.name, max_width=50)
    table.add_column(second.name, max_width=50)

    table.add_row("Price", first.price or "—", second.price or "—")
    table.add_row("Rating", first.rating or "—", second.rating or "—")
    table.add_row(
        "Availability",
        first.availability or "—",
        second.availability or "—",
    )
    table.add_row(
        "Features",
        "\n".join(first.features) or "—",
        "\n".join(second.features) or "—",
    )
    spec_keys = list(
        dict.fromkeys([*first.specifications, *second.specifications])
    )
    for key in spec_keys:
        table.add_row(
            key,
            first.specifications.get(key, "—"),
            second.specifications.get(key, "—"),
        )
    table.add_row(
        "Sources",
        ", ".join(first.sources),
        ", ".join(second.sources),
    )

    Console().print(table)


def _print_logs(entries: list[LogEntry]) -> None:
    """Render the most recent event log entries to stderr."""
    table = Table(title="Event Log", title_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Level", justify="center")
    table.add_column("Source", style="magenta")
    table.add_column("Message")
    for entry in entries:
        style = _LEVEL_STYLES[entry.level]
        table.add_row(
            entry.timestamp[11:19],
            f"[{style}]{entry.level.value.upper()}[/{style}]",
            entry.source,
            entry.message,
        )
    _err.print(table)


def list_strategies() -> int:
    """Print the strategy registry."""
    table = Table(title="Available Strategies", title_style="bold cyan")
    table.add_column("ID", style="bold")
    table.add_column("Label")
    table.add_column("Class", style="dim")
    for entry in Settings.AVAILABLE_STRATEGIES:
        table.add_row(entry["id"], entry["label"], entry["strategy"])
    Console().print(table)
    return 0


async def cli_compare(
    product1: str,
    product2: str,
    strategy_csv: str | None,
    output_format: str,
    output_dir: str | None,
    show_logs: int = 0,
    export_logs: bool = False,
) -> int:
    """Run a headless comparison and return an exit code (0=ok, 1=fail)."""
    if output_dir is not None:
        Settings.RESULTS_DIR = Path(output_dir)

    comparator = ProductComparator()
    _err.print(
        f"[bold]Comparing:[/bold] {product1} [dim]vs[/dim] {product2}"
    )

    try:
        result = await comparator.compare(
            product1, product2, parse_strategy_ids(strategy_csv)
        )
    except ValidationError as exc:
        logger.warning("Comparison rejected: %s", exc)
        _err.print(f"[red]{exc}[/red]")
        return 1

    summary = result.summary
    _err.print(
        f"[green]✓ {summary.total} log entries[/green] "
        f"[dim]({summary.warn} warnings, {summary.error} errors)[/dim]"
    )
    for agg in (result.product1, result.product2):
        if agg.used_fallback:
            _err.print(
                f"[yellow]{agg.product_name}: no strategy returned "
                "data, showing estimated values[/yellow]"
            )

    try:
        manager = FileManager()
        path = manager.save_comparison(result)
        _err.print(f"[dim]Saved comparison → {path}[/dim]")
        if export_logs:
            log_path = manager.export_logs(
                result.logs, f"{product1} vs {product2}"
            )
            _err.print(f"[dim]Exported event log → {log_path}[/dim]")
    except OSError as exc:
        logger.error("Save failed: %s", exc, exc_info=True)
        _err.print(f"[red]Save failed: {exc}[/red]")

    if show_logs > 0:
        _print_logs(comparator.log_sink.recent(show_logs))

    if output_format == "table":
        _print_comparison(result)
    else:
        json.dump(
            result.to_dict(),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0
