"""Shared plumbing for pricegap commands: options, output, errors."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import NoReturn, TextIO

import typer

from pricegap.core.config import PriceGapSettings, get_settings
from pricegap.core.exceptions import DataValidationError, PriceGapError, ProviderError
from pricegap.core.logging import logger
from pricegap.core.services.calendars import normalize_date

from .constants import PROVIDER_EXIT_CODE, SYSTEM_EXIT_CODE, VALIDATION_EXIT_CODE
from .formatters import OutputFormatter, create_formatter


@dataclass(slots=True)
class CommandOptions:
    """Root options stored on ``ctx.obj`` by the app callback."""

    format: str = "table"
    output_path: Path | None = None
    no_color: bool = False
    settings: PriceGapSettings | None = None

    @classmethod
    def from_context(cls, ctx: typer.Context) -> CommandOptions:
        ctx.ensure_object(dict)
        state = ctx.obj or {}
        return cls(
            format=str(state.get("format", "table")),
            output_path=state.get("output_path"),
            no_color=bool(state.get("no_color")),
            settings=state.get("settings"),
        )


def command_settings(ctx: typer.Context) -> PriceGapSettings:
    """Settings loaded by the app callback, falling back to the process settings."""

    return CommandOptions.from_context(ctx).settings or get_settings()


@contextmanager
def open_output(ctx: typer.Context) -> Iterator[tuple[OutputFormatter, TextIO]]:
    """Yield the formatter and stream a command writes its rows to.

    Rows go to stdout unless ``--output`` named a file, which is closed when
    the block exits.
    """

    options = CommandOptions.from_context(ctx)
    formatter = create_formatter(options.format, no_color=options.no_color)
    if options.output_path is None:
        yield formatter, sys.stdout
        return
    try:
        handle = open(options.output_path, "w", encoding="utf-8")
    except OSError as exc:
        emit_error(f"Cannot write to {options.output_path}: {exc}", "OUTPUT_WRITE_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    with handle:
        yield formatter, handle


def parse_day(value: str, label: str) -> date:
    """Parse a ``YYYY-MM-DD`` argument or exit with the validation code."""

    try:
        return normalize_date(value)
    except DataValidationError as error:
        emit_error(f"Invalid {label}: {value!r}", error.error_code)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error


def exit_for_error(error: Exception) -> NoReturn:
    """Report ``error`` on stderr and exit.

    Validation problems exit with 2, provider failures with 3 and anything
    else with 1.
    """

    if not isinstance(error, PriceGapError):
        logger.exception("Unexpected command failure")
        emit_error(str(error) or type(error).__name__, "UNEXPECTED_ERROR")
        raise typer.Exit(code=SYSTEM_EXIT_CODE) from error

    emit_error(error.message, error.error_code, details=error.details)
    if isinstance(error, DataValidationError):
        code = VALIDATION_EXIT_CODE
    elif isinstance(error, ProviderError):
        code = PROVIDER_EXIT_CODE
    else:
        code = SYSTEM_EXIT_CODE
    raise typer.Exit(code=code) from error


def _plain(value: object) -> object:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    return str(value)


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Write ``{"code", "message", "details"}`` as one JSON line to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = _plain(details)
    typer.echo(json.dumps(payload, ensure_ascii=False), err=True)


__all__ = [
    "CommandOptions",
    "command_settings",
    "emit_error",
    "exit_for_error",
    "open_output",
    "parse_day",
]
