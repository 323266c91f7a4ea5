"""Per-date quality classification models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_serializer, model_validator

QUALITY_REAL = 1.0
QUALITY_EXPECTED_GAP = 0.7
QUALITY_MISSING = 0.0

UNKNOWN_SOURCE = "Unknown"

_ALLOWED_QUALITY = frozenset({QUALITY_REAL, QUALITY_EXPECTED_GAP, QUALITY_MISSING})


class DateQuality(BaseModel):
    """Classification of one calendar date for one symbol.

    ``quality`` is 1.0 for a stored observation, 0.7 for a weekend or market
    holiday without one and 0.0 for a business day without one. ``price`` and
    ``source`` are only populated for real observations.
    """

    model_config = ConfigDict(frozen=True)

    has_data: bool
    quality: float
    price: Decimal | None = None
    source: str | None = None

    @model_validator(mode="after")
    def _check_invariant(self) -> DateQuality:
        if self.quality not in _ALLOWED_QUALITY:
            raise ValueError(f"quality must be one of 1.0, 0.7, 0.0, got {self.quality}")
        if self.has_data != (self.quality > QUALITY_MISSING):
            raise ValueError("has_data must be true exactly when quality is above 0.0")
        if self.quality != QUALITY_REAL and (self.price is not None or self.source is not None):
            raise ValueError("price and source are only allowed on real observations")
        return self

    @field_serializer("price", when_used="json")
    def serialize_price(self, value: Decimal | None) -> str | None:
        """Serialize Decimal to string."""
        if value is None:
            return None
        return str(value)

    @property
    def is_real(self) -> bool:
        return self.quality == QUALITY_REAL

    @property
    def is_expected_gap(self) -> bool:
        return self.quality == QUALITY_EXPECTED_GAP

    @property
    def is_missing(self) -> bool:
        return self.quality == QUALITY_MISSING

    @property
    def source_label(self) -> str | None:
        """Source used for filtering; real observations without one read as ``Unknown``."""
        if not self.is_real:
            return self.source
        return self.source or UNKNOWN_SOURCE

    @classmethod
    def real(cls, price: Decimal | float | str | None, source: str | None = None) -> DateQuality:
        return cls(has_data=True, quality=QUALITY_REAL, price=None if price is None else Decimal(str(price)), source=source)

    @classmethod
    def expected_gap(cls) -> DateQuality:
        return cls(has_data=True, quality=QUALITY_EXPECTED_GAP)

    @classmethod
    def missing(cls) -> DateQuality:
        return cls(has_data=False, quality=QUALITY_MISSING)


QualityMap = dict[date, DateQuality]


class PriceGap(BaseModel):
    """Contiguous run of missing business days."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    start: date
    end: date
    missing_days: int


class DateWindow(BaseModel):
    """Inclusive analysis window."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self) -> DateWindow:
        if self.start > self.end:
            raise ValueError(f"window start {self.start} is after end {self.end}")
        return self


__all__ = [
    "QUALITY_EXPECTED_GAP",
    "QUALITY_MISSING",
    "QUALITY_REAL",
    "UNKNOWN_SOURCE",
    "DateQuality",
    "DateWindow",
    "PriceGap",
    "QualityMap",
]
