"""Backfill commands."""

from __future__ import annotations

import asyncio

import typer

from pricegap.core.config import PriceGapSettings
from pricegap.core.models import BackfillResult
from pricegap.core.services import BackfillOrchestrator

from .constants import PROVIDER_EXIT_CODE
from .runtime import build_orchestrator
from .utils import command_settings, exit_for_error, open_output, parse_day

backfill_app = typer.Typer(help="Fetch missing prices from the provider.")

RESULT_COLUMNS = ["symbol", "start", "end", "status", "prices_added", "coverage_percent", "errors"]
PROGRESS_COLUMNS = ["symbol", "status", "prices_added", "error"]


def register(app: typer.Typer) -> None:
    """Register the backfill command group on the provided application."""

    app.add_typer(backfill_app, name="backfill", help="Fetch missing prices from the provider")


def get_orchestrator(settings: PriceGapSettings) -> BackfillOrchestrator:
    """Factory hook for obtaining a :class:`BackfillOrchestrator`."""

    return build_orchestrator(settings)


def _result_row(result: BackfillResult) -> dict[str, object]:
    return {
        "symbol": result.symbol,
        "start": result.start.isoformat(),
        "end": result.end.isoformat(),
        "status": result.status.value,
        "prices_added": result.prices_added,
        "coverage_percent": round(result.coverage.coverage_percent, 2) if result.coverage else None,
        "errors": "; ".join(result.errors) or None,
    }


def _run_range(ctx: typer.Context, symbol: str, start: str, end: str) -> None:
    first = parse_day(start, "START")
    last = parse_day(end, "END")
    with open_output(ctx) as (formatter, stream):
        try:
            orchestrator = get_orchestrator(command_settings(ctx))
            result = asyncio.run(orchestrator.backfill_range(symbol, first, last))
        except Exception as error:
            exit_for_error(error)
        formatter.render([_result_row(result)], stream=stream, columns=RESULT_COLUMNS)
    if not result.success:
        raise typer.Exit(code=PROVIDER_EXIT_CODE)


@backfill_app.command("date")
def date_command(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Symbol to backfill."),
    day: str = typer.Argument(..., help="Date to fetch (YYYY-MM-DD)."),
) -> None:
    """Fetch a single missing date."""

    _run_range(ctx, symbol, day, day)


@backfill_app.command("range")
def range_command(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Symbol to backfill."),
    start: str = typer.Argument(..., help="First date (YYYY-MM-DD)."),
    end: str = typer.Argument(..., help="Last date (YYYY-MM-DD)."),
) -> None:
    """Fetch every missing date in an inclusive range."""

    _run_range(ctx, symbol, start, end)


@backfill_app.command("bulk")
def bulk_command(
    ctx: typer.Context,
    symbols: list[str] = typer.Argument(..., help="Symbols to backfill, processed in order."),
    start: str = typer.Option(..., "--start", help="First date (YYYY-MM-DD)."),
    end: str = typer.Option(..., "--end", help="Last date (YYYY-MM-DD)."),
) -> None:
    """Backfill several symbols one after another under the provider budget."""

    first = parse_day(start, "--start")
    last = parse_day(end, "--end")
    with open_output(ctx) as (formatter, stream):
        try:
            orchestrator = get_orchestrator(command_settings(ctx))
            result = asyncio.run(orchestrator.bulk_backfill(symbols, first, last))
        except Exception as error:
            exit_for_error(error)
        rows = [row.model_dump(mode="json") for row in result.rows]
        formatter.render(rows, stream=stream, columns=PROGRESS_COLUMNS)
    typer.echo(result.summary(), err=True)
    if result.failed:
        raise typer.Exit(code=PROVIDER_EXIT_CODE)


__all__ = ["backfill_app", "get_orchestrator", "register"]
