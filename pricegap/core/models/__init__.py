"""Core data models."""

from pricegap.core.models.backfill import (
    BackfillResult,
    BackfillStatus,
    BulkBackfillProgress,
    BulkBackfillResult,
)
from pricegap.core.models.coverage import CoverageDiagnostic, CoverageOrder, SymbolCoverage
from pricegap.core.models.observation import PriceObservation
from pricegap.core.models.quality import (
    QUALITY_EXPECTED_GAP,
    QUALITY_MISSING,
    QUALITY_REAL,
    UNKNOWN_SOURCE,
    DateQuality,
    DateWindow,
    PriceGap,
    QualityMap,
)

__all__ = [
    "QUALITY_EXPECTED_GAP",
    "QUALITY_MISSING",
    "QUALITY_REAL",
    "UNKNOWN_SOURCE",
    "BackfillResult",
    "BackfillStatus",
    "BulkBackfillProgress",
    "BulkBackfillResult",
    "CoverageDiagnostic",
    "CoverageOrder",
    "DateQuality",
    "DateWindow",
    "PriceGap",
    "PriceObservation",
    "QualityMap",
    "SymbolCoverage",
]
