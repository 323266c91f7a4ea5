"""Coverage aggregation over quality maps."""

from __future__ import annotations

from collections.abc import Iterable

from pricegap.core.models import (
    CoverageDiagnostic,
    CoverageOrder,
    QualityMap,
    SymbolCoverage,
)
from pricegap.core.services.calendars import DEFAULT_CALENDAR, USMarketCalendar


def coverage_percent(days_of_data: int, expected_days: int) -> float:
    """``days_of_data / expected_days * 100`` clamped to [0, 100]; 0 for an empty window."""

    if expected_days <= 0:
        return 0.0
    return max(0.0, min(100.0, days_of_data / expected_days * 100.0))


def summarize(
    symbol: str,
    quality_map: QualityMap,
    *,
    name: str | None = None,
    calendar: USMarketCalendar | None = None,
) -> SymbolCoverage:
    """Summarize a quality map into coverage statistics.

    Only business days are expected. Observations stored on weekends or
    holidays stay in the map but are not counted as days of data.
    """

    calendar = calendar or DEFAULT_CALENDAR
    expected_days = 0
    days_of_data = 0
    missing_days = 0
    for day, entry in quality_map.items():
        business_day = calendar.is_business_day(day)
        if business_day:
            expected_days += 1
            if entry.is_real:
                days_of_data += 1
        if entry.is_missing:
            missing_days += 1

    days = list(quality_map)
    return SymbolCoverage(
        symbol=symbol,
        name=name or symbol,
        coverage_percent=coverage_percent(days_of_data, expected_days),
        days_of_data=days_of_data,
        expected_days=expected_days,
        missing_days=missing_days,
        earliest_date=days[0] if days else None,
        latest_date=days[-1] if days else None,
    )


def summarize_diagnostic(diagnostic: CoverageDiagnostic, *, name: str | None = None) -> SymbolCoverage:
    """Build coverage statistics from externally reported counts."""

    missing = diagnostic.missing_days
    if missing is None:
        missing = max(0, diagnostic.expected_days - diagnostic.days_of_data)
    return SymbolCoverage(
        symbol=diagnostic.symbol,
        name=name or diagnostic.symbol,
        coverage_percent=coverage_percent(diagnostic.days_of_data, diagnostic.expected_days),
        days_of_data=diagnostic.days_of_data,
        expected_days=diagnostic.expected_days,
        missing_days=max(0, missing),
        earliest_date=diagnostic.earliest_date,
        latest_date=diagnostic.latest_date,
    )


def sort_coverage(
    items: Iterable[SymbolCoverage],
    order: CoverageOrder = CoverageOrder.COVERAGE,
) -> list[SymbolCoverage]:
    if order is CoverageOrder.SYMBOL:
        return sorted(items, key=lambda item: item.symbol)
    return sorted(items, key=lambda item: (item.coverage_percent, item.symbol))


__all__ = ["coverage_percent", "sort_coverage", "summarize", "summarize_diagnostic"]
