"""Coverage summary models."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CoverageOrder(str, Enum):
    """Ordering of coverage listings."""

    COVERAGE = "coverage"
    SYMBOL = "symbol"


class SymbolCoverage(BaseModel):
    """Coverage statistics of one symbol over its analysis window."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str | None = None
    coverage_percent: float = Field(ge=0.0, le=100.0)
    days_of_data: int = Field(ge=0)
    expected_days: int = Field(ge=0)
    missing_days: int = Field(ge=0)
    earliest_date: date | None = None
    latest_date: date | None = None


class CoverageDiagnostic(BaseModel):
    """Coverage counts reported by an external diagnostic feed."""

    symbol: str
    days_of_data: int = Field(ge=0)
    expected_days: int = Field(ge=0)
    missing_days: int | None = None
    earliest_date: date | None = None
    latest_date: date | None = None


__all__ = ["CoverageDiagnostic", "CoverageOrder", "SymbolCoverage"]
