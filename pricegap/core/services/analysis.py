"""Coverage analysis over the observation store."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, timedelta
from typing import Protocol, runtime_checkable

from pricegap.core.data.repositories import ObservationStore
from pricegap.core.logging import logger
from pricegap.core.models import CoverageOrder, DateWindow, QualityMap, SymbolCoverage
from pricegap.core.services.calendars import DEFAULT_CALENDAR, USMarketCalendar
from pricegap.core.services.quality import build_quality_map, sort_coverage, summarize

CASH_SYMBOL = "CASH"

SymbolSelection = Iterable[str | tuple[str, str | None]]


@runtime_checkable
class ActivityLookup(Protocol):
    """Reports when a symbol first appeared in the portfolio's transaction history."""

    async def first_activity_date(self, symbol: str) -> date | None: ...


def normalize_selection(selection: SymbolSelection) -> list[tuple[str, str | None]]:
    """Upper-case, de-duplicate (first wins) and drop the cash pseudo-symbol."""

    seen: set[str] = set()
    normalized: list[tuple[str, str | None]] = []
    for item in selection:
        symbol, name = (item, None) if isinstance(item, str) else item
        symbol = symbol.strip().upper()
        if not symbol or symbol == CASH_SYMBOL or symbol in seen:
            continue
        seen.add(symbol)
        normalized.append((symbol, name))
    return normalized


class CoverageAnalyzer:
    """Builds quality maps and coverage summaries for symbols."""

    def __init__(
        self,
        store: ObservationStore,
        *,
        calendar: USMarketCalendar | None = None,
        activity: ActivityLookup | None = None,
        clock: Callable[[], date] | None = None,
        fallback_days: int = 90,
    ) -> None:
        self.store = store
        self.calendar = calendar or DEFAULT_CALENDAR
        self._activity = activity
        self._clock = clock or date.today
        self.fallback_days = fallback_days

    def today(self) -> date:
        return self._clock()

    async def resolve_window(self, symbol: str) -> DateWindow:
        """Window from the symbol's first activity (or the fallback lookback) to today."""

        end = self.today()
        start: date | None = None
        if self._activity is not None:
            start = await self._activity.first_activity_date(symbol.upper())
        if start is None or start > end:
            start = end - timedelta(days=self.fallback_days)
        return DateWindow(start=start, end=end)

    async def get_quality_map(self, symbol: str, window: DateWindow | None = None) -> QualityMap:
        symbol = symbol.upper()
        window = window or await self.resolve_window(symbol)
        observations = await self.store.query(symbol, window.start, window.end)
        return build_quality_map(symbol, window.start, window.end, observations, calendar=self.calendar)

    async def get_symbol_coverage(
        self,
        symbol: str,
        *,
        name: str | None = None,
        window: DateWindow | None = None,
    ) -> SymbolCoverage:
        quality_map = await self.get_quality_map(symbol, window)
        return summarize(symbol.upper(), quality_map, name=name, calendar=self.calendar)

    async def list_symbol_coverage(
        self,
        selection: SymbolSelection,
        *,
        order: CoverageOrder = CoverageOrder.COVERAGE,
    ) -> list[SymbolCoverage]:
        items = normalize_selection(selection)
        coverage = [await self.get_symbol_coverage(symbol, name=name) for symbol, name in items]
        logger.debug("Listed symbol coverage", symbols=len(coverage), order=order.value)
        return sort_coverage(coverage, order)


__all__ = ["ActivityLookup", "CASH_SYMBOL", "CoverageAnalyzer", "normalize_selection"]
