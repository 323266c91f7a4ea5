"""Output formatters for coverage and backfill rows."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Mapping, Sequence, TextIO

from rich.box import SIMPLE
from rich.console import Console
from rich.table import Table
from rich.text import Text

# row values that get a colour in table output
STATUS_STYLES: Mapping[str, str] = {
    "completed": "green",
    "real": "green",
    "processing": "yellow",
    "expected_gap": "yellow",
    "pending": "dim",
    "error": "red",
    "missing": "red",
}
STYLED_COLUMNS = frozenset({"status", "kind"})
_NUMERIC_COLUMNS = frozenset(
    {"coverage_percent", "days_of_data", "expected_days", "missing_days", "prices_added", "quality", "price", "count"}
)


class OutputFormatter:
    """Writes command rows to a text stream."""

    name: str

    def render(
        self,
        rows: Sequence[Mapping[str, object]],
        *,
        stream: TextIO,
        columns: Sequence[str] | None = None,
        title: str | None = None,
    ) -> None:
        raise NotImplementedError


@dataclass(slots=True)
class TableFormatter(OutputFormatter):
    """Render rows as a Rich table."""

    name: str = "table"
    no_color: bool = False

    def render(
        self,
        rows: Sequence[Mapping[str, object]],
        *,
        stream: TextIO,
        columns: Sequence[str] | None = None,
        title: str | None = None,
    ) -> None:
        console = Console(file=stream, color_system=None if self.no_color else "auto", no_color=self.no_color)
        resolved = list(columns) if columns else (list(rows[0].keys()) if rows else [])

        if resolved:
            table = Table(box=SIMPLE, show_lines=False, title=title)
            for column in resolved:
                justify = "right" if column in _NUMERIC_COLUMNS else "left"
                table.add_column(column, header_style="" if self.no_color else "bold", justify=justify)
            for row in rows:
                table.add_row(*(self._cell(column, row.get(column)) for column in resolved))
            console.print(table)
        if not rows:
            console.print("No rows.")

    def _cell(self, column: str, value: object) -> Text:
        if value is None:
            return Text("-")
        if isinstance(value, bool):
            return Text("yes" if value else "no")
        if isinstance(value, float):
            return Text(f"{value:.2f}")
        text = str(value)
        if column in STYLED_COLUMNS and not self.no_color:
            return Text(text, style=STATUS_STYLES.get(text, ""))
        return Text(text)


@dataclass(slots=True)
class JSONLFormatter(OutputFormatter):
    """Render rows as JSON Lines."""

    name: str = "jsonl"

    def render(
        self,
        rows: Sequence[Mapping[str, object]],
        *,
        stream: TextIO,
        columns: Sequence[str] | None = None,
        title: str | None = None,
    ) -> None:
        for row in rows:
            payload = {column: row.get(column) for column in columns} if columns else dict(row)
            json.dump(payload, stream, ensure_ascii=False, default=str)
            stream.write("\n")
        stream.flush()


_FORMATS = ("jsonl", "table")


def create_formatter(name: str, *, no_color: bool = False) -> OutputFormatter:
    """Formatter for ``--format``; ``no_color`` only affects tables."""

    key = name.strip().lower()
    if key == "jsonl":
        return JSONLFormatter()
    if key == "table":
        return TableFormatter(no_color=no_color)
    raise ValueError(f"Unknown output format {name!r}; expected one of {', '.join(_FORMATS)}")


__all__ = ["JSONLFormatter", "OutputFormatter", "TableFormatter", "create_formatter"]
