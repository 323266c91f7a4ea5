from __future__ import annotations

from datetime import date
from decimal import Decimal

import duckdb
import pytest

from pricegap.core.data.repositories import DuckDBObservationStore, ObservationStore
from pricegap.core.data.schema import PRICE_HISTORY_TABLE
from pricegap.core.data.storage import DuckDBFactoryConfig, PriceGapDuckDBFactory
from pricegap.core.models import PriceObservation


def test_price_history_ddl_declares_primary_key() -> None:
    ddl = PRICE_HISTORY_TABLE.create_ddl()

    assert "CREATE TABLE IF NOT EXISTS price_history" in ddl
    assert "PRIMARY KEY (symbol, price_date)" in ddl
    assert PRICE_HISTORY_TABLE.column_names == ("symbol", "price_date", "close_price", "data_source", "created_at")


def test_store_satisfies_protocol(store: DuckDBObservationStore) -> None:
    assert isinstance(store, ObservationStore)


@pytest.mark.asyncio
async def test_writes_are_visible_to_reads(store: DuckDBObservationStore) -> None:
    await store.write("aapl", date(2024, 1, 3), "184.25", "alpha_vantage")
    await store.write("AAPL", date(2024, 1, 2), Decimal("185.64"), None)
    await store.write("MSFT", date(2024, 1, 2), 370.87, "manual")

    rows = await store.query("AAPL", date(2024, 1, 1), date(2024, 1, 31))

    assert [(row.price_date, row.close_price, row.source) for row in rows] == [
        (date(2024, 1, 2), Decimal("185.6400"), None),
        (date(2024, 1, 3), Decimal("184.2500"), "alpha_vantage"),
    ]


@pytest.mark.asyncio
async def test_refetching_a_date_replaces_it(store: DuckDBObservationStore) -> None:
    day = date(2024, 1, 2)
    await store.write("AAPL", day, "185.00", "manual")
    await store.write("AAPL", day, "185.64", "alpha_vantage")

    rows = await store.query("AAPL", day, day)

    assert await store.count("AAPL") == 1
    assert rows[0].close_price == Decimal("185.64")
    assert rows[0].source == "alpha_vantage"


@pytest.mark.asyncio
async def test_write_many_and_bounds(store: DuckDBObservationStore) -> None:
    observations = [
        PriceObservation(symbol="VTI", price_date=date(2024, 1, day), close_price=Decimal("230"), source="alpha_vantage")
        for day in (2, 3, 4, 5)
    ]

    assert await store.write_many(observations) == 4
    assert await store.write_many([]) == 0
    assert [row.price_date for row in await store.query("VTI", date(2024, 1, 3), date(2024, 1, 4))] == [
        date(2024, 1, 3),
        date(2024, 1, 4),
    ]
    assert await store.symbols() == ["VTI"]
    assert await store.earliest_date("VTI") == date(2024, 1, 2)
    assert await store.latest_date("VTI") == date(2024, 1, 5)
    assert await store.latest_date("NONE") is None


def test_factory_creates_schema_and_parent_directory(tmp_path) -> None:
    database = tmp_path / "nested" / "prices.duckdb"
    factory = PriceGapDuckDBFactory(DuckDBFactoryConfig(database=database))

    with factory.connection() as conn:
        tables = conn.execute("SELECT table_name FROM information_schema.tables").fetchall()

    assert ("price_history",) in tables
    assert database.exists()


def test_factory_defaults_to_memory() -> None:
    config = DuckDBFactoryConfig()
    conn = PriceGapDuckDBFactory(config).create_connection()

    assert config.in_memory is True
    assert isinstance(conn, duckdb.DuckDBPyConnection)
    conn.close()
