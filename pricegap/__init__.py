"""pricegap - price history coverage analysis and rate-limited backfill."""

from pricegap.core.exceptions import PriceGapError
from pricegap.core.models import DateQuality, SymbolCoverage
from pricegap.core.services import (
    AnalysisSession,
    BackfillOrchestrator,
    CoverageAnalyzer,
    RateBudget,
    USMarketCalendar,
)

__version__ = "0.1.0"

__all__ = [
    "AnalysisSession",
    "BackfillOrchestrator",
    "CoverageAnalyzer",
    "DateQuality",
    "PriceGapError",
    "RateBudget",
    "SymbolCoverage",
    "USMarketCalendar",
    "__version__",
]
