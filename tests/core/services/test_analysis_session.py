from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from pricegap.core.data.repositories import DuckDBObservationStore
from pricegap.core.services import AnalysisSession, CoverageAnalyzer


@pytest.fixture
def analyzer(store: DuckDBObservationStore, today: date) -> CoverageAnalyzer:
    return CoverageAnalyzer(store, clock=lambda: today, fallback_days=6)


def test_toggle_symbols_and_sources(analyzer: CoverageAnalyzer) -> None:
    session = AnalysisSession(analyzer)

    assert session.toggle_symbol("aapl") is True
    assert session.toggle_symbol("MSFT") is True
    assert session.toggle_symbol("AAPL") is False
    assert session.selected_symbols == {"MSFT"}
    session.clear_selection()
    assert session.selected_symbols == set()

    assert session.toggle_source("manual") is True
    assert session.toggle_source("manual") is False
    assert session.selected_sources == set()


@pytest.mark.asyncio
async def test_select_symbol_loads_map_and_filters(store: DuckDBObservationStore, analyzer: CoverageAnalyzer) -> None:
    await store.write("AAPL", date(2024, 1, 29), Decimal("1"), "manual")
    await store.write("AAPL", date(2024, 1, 30), Decimal("1"), "alpha_vantage")
    session = AnalysisSession(analyzer)

    quality_map = await session.select_symbol("aapl")

    assert session.selected_symbol == "AAPL"
    assert session.window is not None and session.window.end == date(2024, 1, 31)
    assert session.filtered_quality_map is quality_map

    session.toggle_source("manual")
    assert list(session.filtered_quality_map) == [date(2024, 1, 29)]

    await session.select_symbol(None)
    assert session.quality_map == {}


@pytest.mark.asyncio
async def test_refresh_symbol_replaces_single_entry(store: DuckDBObservationStore, analyzer: CoverageAnalyzer) -> None:
    session = AnalysisSession(analyzer)
    await session.load(["AAPL", ("MSFT", "Microsoft")])
    assert [item.coverage_percent for item in session.coverage] == [0.0, 0.0]

    await store.write("MSFT", date(2024, 1, 31), Decimal("400"), "alpha_vantage")
    coverage = await session.refresh_symbol("msft")

    assert coverage.days_of_data == 1
    assert [item.symbol for item in session.coverage] == ["AAPL", "MSFT"]
    assert session.coverage[1].name == "Microsoft"
    assert session.quality_map == {}


@pytest.mark.asyncio
async def test_apply_refresh_updates_map_only_for_selected_symbol(
    store: DuckDBObservationStore, analyzer: CoverageAnalyzer
) -> None:
    session = AnalysisSession(analyzer)
    await session.load(["AAPL", "MSFT"])
    await session.select_symbol("AAPL")
    await store.write("AAPL", date(2024, 1, 31), Decimal("190"), "alpha_vantage")
    await store.write("MSFT", date(2024, 1, 31), Decimal("400"), "alpha_vantage")

    await session.refresh_symbol("MSFT", include_map=True)
    assert session.quality_map[date(2024, 1, 31)].quality == 0.0

    await session.refresh_symbol("AAPL")
    assert session.quality_map[date(2024, 1, 31)].quality == 1.0
