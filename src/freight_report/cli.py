"""CLI entry point for freight-report."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table as RichTable

from freight_report import __version__
from freight_report.config import ReportConfig, load_profile, parse_alias_overrides
from freight_report.extract import extract_records
from freight_report.fields import resolve_field
from freight_report.io import load_raw_sheet
from freight_report.models import FilterSelection, ImportDiagnostics
from freight_report.pipeline import build_report_view
from freight_report.report import write_trip_report
from freight_report.store import DEFAULT_STORE_PATH, Dataset, KeyValueStore

app = typer.Typer(
    name="freport",
    help="freight-report — Per-driver trip reports from messy spreadsheets.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

STORE_ENVVAR = "FREIGHT_REPORT_STORE"


class NumberLocaleOption(str, Enum):
    auto = "auto"
    us = "us"
    eu = "eu"


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"freight-report v{__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logger = logging.getLogger("freight_report")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=err_console, show_path=False, show_time=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _build_config(
    profile: Path | None,
    col_map: list[str] | None,
    dayfirst: bool,
    number_locale: NumberLocaleOption,
) -> ReportConfig:
    try:
        overrides = parse_alias_overrides(load_profile(profile) + (col_map or []))
    except ValueError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    config = ReportConfig(dayfirst=dayfirst, number_locale=number_locale.value)
    return config.with_aliases(overrides)


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "strftime"):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def _print_diagnostics(diag: ImportDiagnostics) -> None:
    tbl = RichTable(title="Import diagnostics", show_lines=True)
    tbl.add_column("Check", style="bold")
    tbl.add_column("Result")
    tbl.add_row("Header row", f"{diag.header_index} (line {diag.header_index + 1})")
    tbl.add_row("Records", str(diag.record_count))
    tbl.add_row("Columns", ", ".join(diag.first_record_keys) or "[yellow]none[/yellow]")
    for key, value in diag.first_record_values.items():
        tbl.add_row(f"  {key}", _format_cell(value))
    console.print(tbl)


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log header detection and persistence details.",
    ),
) -> None:
    """freight-report CLI."""
    _setup_logging(verbose)


# ── import command ───────────────────────────────────────────────


@app.command("import")
def import_file(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to CSV or XLSX input file (first sheet is used).",
        exists=True, readable=True,
    ),
    store_path: Path = typer.Option(
        DEFAULT_STORE_PATH, "--store", "-s",
        envvar=STORE_ENVVAR,
        help="Key-value file holding the imported dataset.",
    ),
    profile: Path | None = typer.Option(
        None, "--profile",
        help="Profile file with extra header aliases (field=Header lines).",
    ),
    col_map: list[str] | None = typer.Option(
        None, "--map", "-m",
        help="Extra header alias: field=Header, field is driver, date or amount.",
    ),
    dayfirst: bool = typer.Option(
        False,
        "--dayfirst/--monthfirst",
        help="Date parsing mode for ambiguous values like 01/02/2024.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output.",
    ),
) -> None:
    """Replace the stored dataset with the records of INPUT."""
    echo = _printer(quiet)
    config = _build_config(profile, col_map, dayfirst, NumberLocaleOption.auto)

    echo("[blue]>[/blue] Loading input file …")
    try:
        raw_df = load_raw_sheet(input_file)
    except (FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    echo(f"  {len(raw_df)} rows x {len(raw_df.columns)} columns")

    extraction = extract_records(
        raw_df,
        keywords=config.header_keywords,
        max_rows_scanned=config.header_scan_rows,
    )
    dataset = Dataset(KeyValueStore(store_path))
    dataset.replace(extraction.records, input_file.name)

    if not quiet:
        _print_diagnostics(extraction.diagnostics)
        view = build_report_view(dataset.records, FilterSelection(), config)
        if view.undated_count:
            console.print(
                f"  [yellow]![/yellow] {view.undated_count} records have no usable date "
                f"(looked for: {', '.join(config.date_aliases)})"
            )
    if not extraction.records:
        console.print("  [yellow]![/yellow] No records found; stored dataset cleared")
    echo(f"  Stored {len(dataset)} records -> {store_path}")


# ── options command ──────────────────────────────────────────────


@app.command()
def options(
    store_path: Path = typer.Option(
        DEFAULT_STORE_PATH, "--store", "-s",
        envvar=STORE_ENVVAR,
        help="Key-value file holding the imported dataset.",
    ),
    profile: Path | None = typer.Option(
        None, "--profile",
        help="Profile file with extra header aliases (field=Header lines).",
    ),
    col_map: list[str] | None = typer.Option(
        None, "--map", "-m",
        help="Extra header alias: field=Header, field is driver, date or amount.",
    ),
    dayfirst: bool = typer.Option(
        False,
        "--dayfirst/--monthfirst",
        help="Date parsing mode for ambiguous values like 01/02/2024.",
    ),
) -> None:
    """List the drivers, months and weeks available for filtering."""
    config = _build_config(profile, col_map, dayfirst, NumberLocaleOption.auto)
    dataset = Dataset.load(KeyValueStore(store_path))
    view = build_report_view(dataset.records, FilterSelection(), config)

    tbl = RichTable(title=f"Options ({dataset.file_name or 'no data'})", show_lines=True)
    tbl.add_column("Filter", style="bold")
    tbl.add_column("Values")
    tbl.add_row("Drivers", "\n".join(view.drivers) or "-")
    tbl.add_row("Months", "\n".join(view.months) or "-")
    tbl.add_row("Weeks", "\n".join(view.weeks) or "-")
    console.print(tbl)


# ── report command ───────────────────────────────────────────────


@app.command()
def report(
    store_path: Path = typer.Option(
        DEFAULT_STORE_PATH, "--store", "-s",
        envvar=STORE_ENVVAR,
        help="Key-value file holding the imported dataset.",
    ),
    driver: str | None = typer.Option(None, "--driver", "-d", help="Exact driver name."),
    month: str | None = typer.Option(None, "--month", help='Month key, e.g. "enero 2024".'),
    week: str | None = typer.Option(None, "--week", help='Week key, e.g. "Semana 3 - 2024".'),
    out: Path | None = typer.Option(
        None, "--out", "-o",
        help="Also write a printable .xlsx report to this path.",
    ),
    profile: Path | None = typer.Option(
        None, "--profile",
        help="Profile file with extra header aliases (field=Header lines).",
    ),
    col_map: list[str] | None = typer.Option(
        None, "--map", "-m",
        help="Extra header alias: field=Header, field is driver, date or amount.",
    ),
    dayfirst: bool = typer.Option(
        False,
        "--dayfirst/--monthfirst",
        help="Date parsing mode for ambiguous values like 01/02/2024.",
    ),
    number_locale: NumberLocaleOption = typer.Option(
        NumberLocaleOption.auto,
        "--number-locale",
        help="Amount parsing mode: auto, us, or eu.",
    ),
) -> None:
    """Show the trips matching the filters and their total."""
    if month and week:
        _err("--month and --week are mutually exclusive; pick one")
        raise typer.Exit(code=2)
    config = _build_config(profile, col_map, dayfirst, number_locale)

    selection = FilterSelection()
    selection.select_driver(driver)
    selection.select_month(month)
    selection.select_week(week)

    dataset = Dataset.load(KeyValueStore(store_path))
    view = build_report_view(dataset.records, selection, config)

    columns = view.columns
    tbl = RichTable(title=f"{dataset.file_name or 'Informe'} — {selection.describe()}")
    for name in columns:
        tbl.add_column(name)
    for row in view.rows:
        tbl.add_row(*(_format_cell(row.get(name)) for name in columns))
    if columns:
        console.print(tbl)
    else:
        console.print("  No trips match the current filters")

    if view.undated_count:
        console.print(
            f"  [yellow]![/yellow] {view.undated_count} records without a usable date "
            "are not shown"
        )
    amount_field = resolve_field({c: c for c in columns}, config.amount_aliases)
    label = f"TOTAL ({amount_field})" if amount_field else "TOTAL"
    console.print(Panel(
        f"[bold]{len(view.rows)}[/bold] trips   {label}: [bold]{view.total:,.2f}[/bold]",
        border_style="green",
    ))

    if out:
        path = write_trip_report(
            out, view, selection,
            amount_aliases=config.amount_aliases,
            file_name=dataset.file_name,
        )
        console.print(f"  Report -> {path}")


# ── delete command ───────────────────────────────────────────────


@app.command()
def delete(
    store_path: Path = typer.Option(
        DEFAULT_STORE_PATH, "--store", "-s",
        envvar=STORE_ENVVAR,
        help="Key-value file holding the imported dataset.",
    ),
    delete_all: bool = typer.Option(False, "--all", help="Delete every stored record."),
    month: str | None = typer.Option(None, "--month", help="Delete the records of this month."),
    week: str | None = typer.Option(None, "--week", help="Delete the records of this week."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    profile: Path | None = typer.Option(
        None, "--profile",
        help="Profile file with extra header aliases (field=Header lines).",
    ),
    col_map: list[str] | None = typer.Option(
        None, "--map", "-m",
        help="Extra header alias: field=Header, field is driver, date or amount.",
    ),
    dayfirst: bool = typer.Option(
        False,
        "--dayfirst/--monthfirst",
        help="Date parsing mode for ambiguous values like 01/02/2024.",
    ),
) -> None:
    """Delete all stored records, or those of one month or week."""
    chosen = [flag for flag in (delete_all, bool(month), bool(week)) if flag]
    if len(chosen) != 1:
        _err("Pass exactly one of --all, --month or --week")
        raise typer.Exit(code=2)
    config = _build_config(profile, col_map, dayfirst, NumberLocaleOption.auto)
    dataset = Dataset.load(KeyValueStore(store_path))

    if delete_all:
        scope = "ALL stored data"
    elif month:
        scope = f"every trip in {month}"
    else:
        scope = f"every trip in {week}"
    if not yes:
        typer.confirm(f"Delete {scope}?", abort=True)

    if delete_all:
        removed = dataset.delete_all()
    elif month:
        removed = dataset.delete_month(month, config.date_aliases, dayfirst=config.dayfirst)
    else:
        removed = dataset.delete_week(week or "", config.date_aliases, dayfirst=config.dayfirst)
    console.print(f"  Deleted {removed} records; {len(dataset)} remain")
