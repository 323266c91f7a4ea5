"""Transient state of one interactive analysis session."""

from __future__ import annotations

from pricegap.core.models import CoverageOrder, DateWindow, QualityMap, SymbolCoverage
from pricegap.core.services.analysis import CoverageAnalyzer, SymbolSelection, normalize_selection
from pricegap.core.services.quality import filter_by_sources, sort_coverage


class AnalysisSession:
    """Selection, quality map and coverage list of one session.

    Nothing here is persisted; the session only mirrors what the analyzer
    computes and what the user selected.
    """

    def __init__(
        self,
        analyzer: CoverageAnalyzer,
        *,
        order: CoverageOrder = CoverageOrder.COVERAGE,
        keep_expected_gaps: bool = False,
    ) -> None:
        self.analyzer = analyzer
        self.order = order
        self.keep_expected_gaps = keep_expected_gaps
        self.selected_symbol: str | None = None
        self.selected_symbols: set[str] = set()
        self.selected_sources: set[str] = set()
        self.quality_map: QualityMap = {}
        self.window: DateWindow | None = None
        self.coverage: list[SymbolCoverage] = []
        self._names: dict[str, str | None] = {}

    @property
    def symbols(self) -> list[str]:
        return list(self._names)

    @property
    def filtered_quality_map(self) -> QualityMap:
        return filter_by_sources(self.quality_map, self.selected_sources, keep_expected_gaps=self.keep_expected_gaps)

    async def load(self, selection: SymbolSelection) -> list[SymbolCoverage]:
        """Track ``selection`` and compute its coverage list."""
        self._names = dict(normalize_selection(selection))
        return await self.refresh()

    async def refresh(self) -> list[SymbolCoverage]:
        self.coverage = await self.analyzer.list_symbol_coverage(self._names.items(), order=self.order)
        return self.coverage

    async def select_symbol(self, symbol: str | None) -> QualityMap:
        """Make ``symbol`` current and load its quality map; ``None`` clears it."""
        if symbol is None:
            self.selected_symbol = None
            self.quality_map = {}
            self.window = None
            return self.quality_map
        self.selected_symbol = symbol.upper()
        self.window = await self.analyzer.resolve_window(self.selected_symbol)
        self.quality_map = await self.analyzer.get_quality_map(self.selected_symbol, self.window)
        return self.quality_map

    def toggle_symbol(self, symbol: str) -> bool:
        """Flip bulk selection of ``symbol``; returns whether it is now selected."""
        symbol = symbol.upper()
        if symbol in self.selected_symbols:
            self.selected_symbols.discard(symbol)
            return False
        self.selected_symbols.add(symbol)
        return True

    def clear_selection(self) -> None:
        self.selected_symbols.clear()

    def toggle_source(self, source: str) -> bool:
        if source in self.selected_sources:
            self.selected_sources.discard(source)
            return False
        self.selected_sources.add(source)
        return True

    async def refresh_symbol(self, symbol: str, *, include_map: bool | None = None) -> SymbolCoverage:
        """Recompute one symbol's coverage, and its map when it is the selected symbol."""
        symbol = symbol.upper()
        if include_map is None:
            include_map = symbol == self.selected_symbol
        quality_map = None
        if include_map:
            window = await self.analyzer.resolve_window(symbol)
            quality_map = await self.analyzer.get_quality_map(symbol, window)
        coverage = await self.analyzer.get_symbol_coverage(symbol, name=self._names.get(symbol))
        self.apply_refresh(coverage, quality_map)
        return coverage

    def apply_refresh(self, coverage: SymbolCoverage, quality_map: QualityMap | None = None) -> None:
        """Replace one symbol's coverage entry and, for the selected symbol, its map."""
        symbol = coverage.symbol
        if self._names.get(symbol) and coverage.name in (None, symbol):
            coverage = coverage.model_copy(update={"name": self._names[symbol]})
        others = [item for item in self.coverage if item.symbol != symbol]
        self._names.setdefault(symbol, coverage.name)
        self.coverage = sort_coverage([*others, coverage], self.order)
        if quality_map is not None and symbol == self.selected_symbol:
            self.quality_map = quality_map


__all__ = ["AnalysisSession"]
