"""Per-day provider call counts kept next to the price history."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import duckdb

from pricegap.core.data.schema import PROVIDER_CALLS_TABLE
from pricegap.core.exceptions import StorageError

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


@runtime_checkable
class CallLedger(Protocol):
    """Durable count of provider calls made on a given day."""

    def calls(self, provider: str, day: date) -> int: ...

    def record(self, provider: str, day: date) -> int: ...


_INCREMENT_SQL = f"""
    INSERT INTO {PROVIDER_CALLS_TABLE.name} (provider, call_date, calls)
    VALUES (?, ?, 1)
    ON CONFLICT (provider, call_date) DO UPDATE SET calls = calls + 1
"""


class DuckDBCallLedger:
    """Call ledger stored in the ``provider_calls`` table.

    Every process pointed at the same database file shares the count, so
    the daily cap holds across separate CLI invocations.
    """

    def __init__(self, conn: DuckDBPyConnection) -> None:
        self._conn = conn
        PROVIDER_CALLS_TABLE.ensure(conn)

    def calls(self, provider: str, day: date) -> int:
        try:
            row = self._conn.execute(
                f"SELECT calls FROM {PROVIDER_CALLS_TABLE.name} WHERE provider = ? AND call_date = ?",
                [provider, day],
            ).fetchone()
        except duckdb.Error as exc:
            raise StorageError(f"Failed to read call count for {provider}: {exc}", PROVIDER_CALLS_TABLE.name) from exc
        return int(row[0]) if row else 0

    def record(self, provider: str, day: date) -> int:
        """Count one more call and return the day's new total."""
        try:
            self._conn.execute(_INCREMENT_SQL, [provider, day])
        except duckdb.Error as exc:
            raise StorageError(f"Failed to record call for {provider}: {exc}", PROVIDER_CALLS_TABLE.name) from exc
        return self.calls(provider, day)


__all__ = ["CallLedger", "DuckDBCallLedger"]
