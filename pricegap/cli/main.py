"""Main entry point for the pricegap command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from pricegap.core.config import load_settings
from pricegap.core.exceptions import PriceGapError
from pricegap.core.logging import LogConfig, apply_config

from .backfill import register as register_backfill_commands
from .calendars import register as register_calendar_commands
from .constants import VALIDATION_EXIT_CODE
from .coverage import register as register_coverage_commands
from .formatters import create_formatter
from .utils import emit_error


def create_app() -> typer.Typer:
    """Create a Typer application instance for pricegap."""

    app = typer.Typer(add_completion=False, help="pricegap command line interface")

    @app.callback()
    def main(
        ctx: typer.Context,
        format: str = typer.Option(
            "table",
            "--format",
            "-f",
            help="Output format (table or jsonl).",
            show_default=True,
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Write output to a file instead of stdout.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Log level; defaults to the configured one.",
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable colorized output for table format.",
        ),
        database: str | None = typer.Option(
            None,
            "--database",
            help="DuckDB database path; overrides the configured one.",
        ),
        config: Path | None = typer.Option(
            None,
            "--config",
            help="TOML configuration file.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        normalized_format = format.strip().lower()
        try:
            create_formatter(normalized_format, no_color=no_color)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--format") from exc

        try:
            settings = load_settings(config)
        except PriceGapError as error:
            emit_error(error.message, error.error_code, details=error.details)
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from error
        if database:
            settings.storage.database = database

        log_config = LogConfig.from_settings(settings.logging, level=log_level)
        apply_config(log_config)
        ctx.obj.update(
            {
                "format": normalized_format,
                "output_path": output,
                "log_level": log_config.level,
                "no_color": no_color,
                "settings": settings,
            }
        )

    register_coverage_commands(app)
    register_backfill_commands(app)
    register_calendar_commands(app)
    return app


app = create_app()
