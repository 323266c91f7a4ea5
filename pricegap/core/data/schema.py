"""DuckDB table definitions."""

from __future__ import annotations

from collections.abc import Sequence  # noqa: TC003
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


@dataclass(frozen=True)
class ColumnDef:
    """Represents a DuckDB table column definition."""

    name: str
    data_type: str
    constraints: Sequence[str] = ()

    def render(self) -> str:
        return " ".join([self.name, self.data_type, *self.constraints])


@dataclass(frozen=True)
class TableSchema:
    """DuckDB table schema with idempotent creation."""

    name: str
    columns: Sequence[ColumnDef]
    primary_key: Sequence[str] = ()

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def create_ddl(self) -> str:
        column_defs = [column.render() for column in self.columns]
        if self.primary_key:
            column_defs.append(f"PRIMARY KEY ({', '.join(self.primary_key)})")
        columns_sql = ",\n                ".join(column_defs)
        return f"""
            CREATE TABLE IF NOT EXISTS {self.name} (
                {columns_sql}
            )
            """.strip()

    def ensure(self, conn: DuckDBPyConnection) -> None:
        """Create the table on the provided connection if it does not exist."""

        conn.execute(self.create_ddl())


PRICE_HISTORY_TABLE = TableSchema(
    name="price_history",
    columns=(
        ColumnDef("symbol", "VARCHAR", ("NOT NULL",)),
        ColumnDef("price_date", "DATE", ("NOT NULL",)),
        ColumnDef("close_price", "DECIMAL(15,4)", ("NOT NULL",)),
        ColumnDef("data_source", "VARCHAR"),
        ColumnDef("created_at", "TIMESTAMP", ("NOT NULL",)),
    ),
    primary_key=("symbol", "price_date"),
)


PROVIDER_CALLS_TABLE = TableSchema(
    name="provider_calls",
    columns=(
        ColumnDef("provider", "VARCHAR", ("NOT NULL",)),
        ColumnDef("call_date", "DATE", ("NOT NULL",)),
        ColumnDef("calls", "INTEGER", ("NOT NULL",)),
    ),
    primary_key=("provider", "call_date"),
)


def ensure_price_history(conn: DuckDBPyConnection) -> None:
    PRICE_HISTORY_TABLE.ensure(conn)


__all__ = ["ColumnDef", "PRICE_HISTORY_TABLE", "PROVIDER_CALLS_TABLE", "TableSchema", "ensure_price_history"]
