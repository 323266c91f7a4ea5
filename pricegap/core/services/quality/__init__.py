"""Quality classification, coverage and source filtering."""

from pricegap.core.services.quality.classifier import build_quality_map, find_price_gaps, missing_dates
from pricegap.core.services.quality.coverage import (
    coverage_percent,
    sort_coverage,
    summarize,
    summarize_diagnostic,
)
from pricegap.core.services.quality.source_filter import (
    available_sources,
    filter_by_sources,
    source_breakdown,
)

__all__ = [
    "available_sources",
    "build_quality_map",
    "coverage_percent",
    "filter_by_sources",
    "find_price_gaps",
    "missing_dates",
    "sort_coverage",
    "source_breakdown",
    "summarize",
    "summarize_diagnostic",
]
