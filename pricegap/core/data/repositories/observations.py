"""Observation store: daily closes keyed by symbol and date."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import duckdb

from pricegap.core.data.schema import PRICE_HISTORY_TABLE
from pricegap.core.exceptions import StorageError
from pricegap.core.logging import logger
from pricegap.core.models import PriceObservation

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


@runtime_checkable
class ObservationStore(Protocol):
    """Read/write access to stored price observations."""

    async def query(self, symbol: str, start: date, end: date) -> list[PriceObservation]: ...

    async def write(
        self,
        symbol: str,
        day: date,
        close_price: Decimal | float | str,
        source: str | None = None,
    ) -> None: ...

    async def write_many(self, observations: Iterable[PriceObservation]) -> int: ...


_UPSERT_SQL = f"""
    INSERT INTO {PRICE_HISTORY_TABLE.name}
    (symbol, price_date, close_price, data_source, created_at)
    VALUES (?, ?, ?, ?, ?)
    ON CONFLICT (symbol, price_date) DO UPDATE SET
        close_price = excluded.close_price,
        data_source = excluded.data_source,
        created_at = excluded.created_at
"""


class DuckDBObservationStore:
    """Observation store backed by the ``price_history`` table.

    Writes are upserts on ``(symbol, price_date)`` so refetching a stored
    date replaces it instead of adding a row. Writes are visible to the
    next read on the same connection.
    """

    def __init__(self, conn: DuckDBPyConnection) -> None:
        self._conn = conn
        PRICE_HISTORY_TABLE.ensure(conn)

    @property
    def connection(self) -> DuckDBPyConnection:
        return self._conn

    async def query(self, symbol: str, start: date, end: date) -> list[PriceObservation]:
        try:
            rows = self._conn.execute(
                f"""
                SELECT symbol, price_date, close_price, data_source
                FROM {PRICE_HISTORY_TABLE.name}
                WHERE symbol = ? AND price_date BETWEEN ? AND ?
                ORDER BY price_date
                """,
                [symbol.upper(), start, end],
            ).fetchall()
        except duckdb.Error as exc:
            raise StorageError(f"Failed to read prices for {symbol}: {exc}", PRICE_HISTORY_TABLE.name) from exc
        return [
            PriceObservation(symbol=row[0], price_date=row[1], close_price=Decimal(str(row[2])), source=row[3])
            for row in rows
        ]

    async def write(
        self,
        symbol: str,
        day: date,
        close_price: Decimal | float | str,
        source: str | None = None,
    ) -> None:
        await self.write_many(
            [PriceObservation(symbol=symbol, price_date=day, close_price=Decimal(str(close_price)), source=source)]
        )

    async def write_many(self, observations: Iterable[PriceObservation]) -> int:
        now = datetime.now()
        rows = [
            [item.symbol, item.price_date, item.close_price, item.source, now]
            for item in observations
        ]
        if not rows:
            return 0
        try:
            self._conn.executemany(_UPSERT_SQL, rows)
        except duckdb.Error as exc:
            raise StorageError(f"Failed to write {len(rows)} prices: {exc}", PRICE_HISTORY_TABLE.name) from exc
        logger.debug("Stored price observations", count=len(rows))
        return len(rows)

    async def symbols(self) -> list[str]:
        rows = self._conn.execute(
            f"SELECT DISTINCT symbol FROM {PRICE_HISTORY_TABLE.name} ORDER BY symbol"
        ).fetchall()
        return [row[0] for row in rows]

    async def earliest_date(self, symbol: str) -> date | None:
        row = self._conn.execute(
            f"SELECT MIN(price_date) FROM {PRICE_HISTORY_TABLE.name} WHERE symbol = ?",
            [symbol.upper()],
        ).fetchone()
        return row[0] if row else None

    async def latest_date(self, symbol: str) -> date | None:
        row = self._conn.execute(
            f"SELECT MAX(price_date) FROM {PRICE_HISTORY_TABLE.name} WHERE symbol = ?",
            [symbol.upper()],
        ).fetchone()
        return row[0] if row else None

    async def count(self, symbol: str | None = None) -> int:
        if symbol is None:
            row = self._conn.execute(f"SELECT COUNT(*) FROM {PRICE_HISTORY_TABLE.name}").fetchone()
        else:
            row = self._conn.execute(
                f"SELECT COUNT(*) FROM {PRICE_HISTORY_TABLE.name} WHERE symbol = ?",
                [symbol.upper()],
            ).fetchone()
        return int(row[0]) if row else 0


__all__ = ["DuckDBObservationStore", "ObservationStore"]
