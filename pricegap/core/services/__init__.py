"""Coverage analysis and backfill services."""

from pricegap.core.services.analysis import ActivityLookup, CoverageAnalyzer
from pricegap.core.services.backfill import BackfillOrchestrator, BulkBackfillHandle
from pricegap.core.services.calendars import USMarketCalendar
from pricegap.core.services.rate_limit import RateBudget, get_rate_budget
from pricegap.core.services.session import AnalysisSession

__all__ = [
    "ActivityLookup",
    "AnalysisSession",
    "BackfillOrchestrator",
    "BulkBackfillHandle",
    "CoverageAnalyzer",
    "RateBudget",
    "USMarketCalendar",
    "get_rate_budget",
]
