from __future__ import annotations

from datetime import date
from decimal import Decimal

from pricegap.core.models import PriceObservation
from pricegap.core.services.quality import (
    available_sources,
    build_quality_map,
    filter_by_sources,
    source_breakdown,
)


def _quality_map():
    observations = [
        PriceObservation(symbol="VTI", price_date=date(2024, 1, 2), close_price=Decimal("1"), source="alpha_vantage"),
        PriceObservation(symbol="VTI", price_date=date(2024, 1, 3), close_price=Decimal("1"), source="manual"),
        PriceObservation(symbol="VTI", price_date=date(2024, 1, 4), close_price=Decimal("1"), source=None),
        PriceObservation(symbol="VTI", price_date=date(2024, 1, 5), close_price=Decimal("1"), source="alpha_vantage"),
    ]
    # 2024-01-06/07 weekend, 2024-01-08 missing
    return build_quality_map("VTI", date(2024, 1, 2), date(2024, 1, 8), observations)


def test_empty_selection_returns_same_map() -> None:
    quality_map = _quality_map()

    assert filter_by_sources(quality_map, set()) is quality_map
    assert filter_by_sources(quality_map, []) is quality_map


def test_filter_keeps_only_selected_sources() -> None:
    filtered = filter_by_sources(_quality_map(), {"alpha_vantage"})

    assert list(filtered) == [date(2024, 1, 2), date(2024, 1, 5)]
    assert all(entry.source == "alpha_vantage" for entry in filtered.values())


def test_missing_source_matches_unknown() -> None:
    filtered = filter_by_sources(_quality_map(), {"Unknown"})

    assert list(filtered) == [date(2024, 1, 4)]


def test_expected_gaps_can_be_kept() -> None:
    filtered = filter_by_sources(_quality_map(), {"manual"}, keep_expected_gaps=True)

    assert list(filtered) == [date(2024, 1, 3), date(2024, 1, 6), date(2024, 1, 7)]
    assert date(2024, 1, 8) not in filtered


def test_source_breakdown_counts_real_observations() -> None:
    quality_map = _quality_map()

    assert source_breakdown(quality_map) == [("alpha_vantage", 2), ("Unknown", 1), ("manual", 1)]
    assert available_sources(quality_map) == ["Unknown", "alpha_vantage", "manual"]
