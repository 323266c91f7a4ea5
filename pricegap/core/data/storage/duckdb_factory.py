"""DuckDB connections for the observation store."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

from pricegap.core.data.schema import ensure_price_history
from pricegap.core.exceptions import StorageError
from pricegap.core.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from duckdb import DuckDBPyConnection

    from pricegap.core.config import StorageSettings

MEMORY_DATABASE = ":memory:"


@dataclass(frozen=True)
class DuckDBFactoryConfig:
    """Database location and the ``SET`` options applied to each connection."""

    database: str | Path = MEMORY_DATABASE
    read_only: bool = False
    pragmas: Mapping[str, object] = field(default_factory=lambda: {"threads": 1})

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> DuckDBFactoryConfig:
        return cls(database=settings.database)

    @property
    def in_memory(self) -> bool:
        return str(self.database) == MEMORY_DATABASE


class PriceGapDuckDBFactory:
    """Opens DuckDB connections with the ``price_history`` table in place.

    File databases get their parent directory created on first use. Read-only
    connections skip the schema step.
    """

    def __init__(self, config: DuckDBFactoryConfig | None = None) -> None:
        self._config = config or DuckDBFactoryConfig()

    @property
    def database(self) -> str:
        return str(self._config.database)

    def create_connection(self) -> DuckDBPyConnection:
        config = self._config
        if not config.in_memory and not config.read_only:
            Path(config.database).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = duckdb.connect(database=self.database, read_only=config.read_only)
            for setting, value in config.pragmas.items():
                conn.execute(f"SET {setting}=?", [value])
        except duckdb.Error as exc:
            raise StorageError(f"Cannot open database {self.database}: {exc}") from exc
        if not config.read_only:
            ensure_price_history(conn)
        logger.debug("Opened price database", database=self.database, read_only=config.read_only)
        return conn

    @contextmanager
    def connection(self) -> Iterator[DuckDBPyConnection]:
        """Yield a connection that is closed when the block exits."""

        conn = self.create_connection()
        try:
            yield conn
        finally:
            conn.close()


__all__ = ["DuckDBFactoryConfig", "MEMORY_DATABASE", "PriceGapDuckDBFactory"]
