"""Coverage inspection commands."""

from __future__ import annotations

import asyncio

import typer

from pricegap.core.config import PriceGapSettings
from pricegap.core.exceptions import InvalidDateRangeError
from pricegap.core.models import CoverageOrder, DateQuality, DateWindow, QualityMap
from pricegap.core.services import CoverageAnalyzer
from pricegap.core.services.calendars import normalize_date
from pricegap.core.services.quality import filter_by_sources, find_price_gaps, source_breakdown

from .constants import VALIDATION_EXIT_CODE
from .runtime import build_analyzer
from .utils import command_settings, emit_error, exit_for_error, open_output

coverage_app = typer.Typer(help="Inspect price history coverage.")

LIST_COLUMNS = [
    "symbol",
    "name",
    "coverage_percent",
    "days_of_data",
    "expected_days",
    "missing_days",
    "earliest_date",
    "latest_date",
]
MAP_COLUMNS = ["date", "weekday", "kind", "quality", "price", "source"]
GAP_COLUMNS = ["symbol", "start", "end", "missing_days"]
SOURCE_COLUMNS = ["source", "count"]


def register(app: typer.Typer) -> None:
    """Register the coverage command group on the provided application."""

    app.add_typer(coverage_app, name="coverage", help="Inspect price history coverage")


def get_analyzer(settings: PriceGapSettings) -> CoverageAnalyzer:
    """Factory hook for obtaining a :class:`CoverageAnalyzer`."""

    return build_analyzer(settings)


def _kind(entry: DateQuality) -> str:
    if entry.is_real:
        return "real"
    if entry.is_expected_gap:
        return "expected_gap"
    return "missing"


def _map_rows(quality_map: QualityMap) -> list[dict[str, object]]:
    return [
        {
            "date": day.isoformat(),
            "weekday": day.strftime("%a"),
            "kind": _kind(entry),
            "quality": entry.quality,
            "price": str(entry.price) if entry.price is not None else None,
            "source": entry.source,
        }
        for day, entry in quality_map.items()
    ]


async def _load_map(
    analyzer: CoverageAnalyzer,
    symbol: str,
    start: str | None,
    end: str | None,
) -> QualityMap:
    window = await analyzer.resolve_window(symbol)
    first = normalize_date(start) if start else window.start
    last = normalize_date(end) if end else window.end
    if first > last:
        raise InvalidDateRangeError(f"start {first} is after end {last}", start=first, end=last)
    return await analyzer.get_quality_map(symbol, DateWindow(start=first, end=last))


@coverage_app.command("list")
def list_command(
    ctx: typer.Context,
    symbols: list[str] = typer.Argument(..., help="Symbols to summarize."),
    sort: str = typer.Option("coverage", "--sort", help="Sort by 'coverage' (ascending) or 'symbol'."),
) -> None:
    """Show coverage statistics for each symbol, worst first."""

    try:
        order = CoverageOrder(sort.strip().lower())
    except ValueError as exc:
        emit_error(f"Unsupported sort order '{sort}'", "VALIDATION_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc

    with open_output(ctx) as (formatter, stream):
        analyzer = get_analyzer(command_settings(ctx))
        try:
            coverage = asyncio.run(analyzer.list_symbol_coverage(symbols, order=order))
        except Exception as error:
            exit_for_error(error)
        rows = [item.model_dump(mode="json") for item in coverage]
        for row, item in zip(rows, coverage):
            row["coverage_percent"] = round(item.coverage_percent, 2)
        formatter.render(rows, stream=stream, columns=LIST_COLUMNS)


@coverage_app.command("map")
def map_command(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Symbol to inspect."),
    start: str | None = typer.Option(None, "--start", help="Start date (YYYY-MM-DD)."),
    end: str | None = typer.Option(None, "--end", help="End date (YYYY-MM-DD)."),
    sources: list[str] = typer.Option([], "--source", help="Only show prices from this source (repeatable)."),
    missing_only: bool = typer.Option(False, "--missing-only", help="Only show business days without data."),
) -> None:
    """Show the per-date quality classification of one symbol."""

    settings = command_settings(ctx)
    with open_output(ctx) as (formatter, stream):
        analyzer = get_analyzer(settings)
        try:
            quality_map = asyncio.run(_load_map(analyzer, symbol.upper(), start, end))
        except Exception as error:
            exit_for_error(error)
        quality_map = filter_by_sources(
            quality_map,
            sources,
            keep_expected_gaps=settings.filter.keep_expected_gaps,
        )
        if missing_only:
            quality_map = {day: entry for day, entry in quality_map.items() if entry.is_missing}
        formatter.render(_map_rows(quality_map), stream=stream, columns=MAP_COLUMNS, title=symbol.upper())


@coverage_app.command("gaps")
def gaps_command(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Symbol to inspect."),
    start: str | None = typer.Option(None, "--start", help="Start date (YYYY-MM-DD)."),
    end: str | None = typer.Option(None, "--end", help="End date (YYYY-MM-DD)."),
) -> None:
    """List contiguous runs of missing business days."""

    with open_output(ctx) as (formatter, stream):
        analyzer = get_analyzer(command_settings(ctx))
        try:
            quality_map = asyncio.run(_load_map(analyzer, symbol.upper(), start, end))
        except Exception as error:
            exit_for_error(error)
        gaps = find_price_gaps(symbol.upper(), quality_map)
        formatter.render([gap.model_dump(mode="json") for gap in gaps], stream=stream, columns=GAP_COLUMNS)


@coverage_app.command("sources")
def sources_command(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Symbol to inspect."),
) -> None:
    """Count stored prices per data source."""

    with open_output(ctx) as (formatter, stream):
        analyzer = get_analyzer(command_settings(ctx))
        try:
            quality_map = asyncio.run(analyzer.get_quality_map(symbol))
        except Exception as error:
            exit_for_error(error)
        rows = [{"source": source, "count": count} for source, count in source_breakdown(quality_map)]
        formatter.render(rows, stream=stream, columns=SOURCE_COLUMNS)


__all__ = ["coverage_app", "get_analyzer", "register"]
