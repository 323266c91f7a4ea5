"""Stored daily price observation."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator


class PriceObservation(BaseModel):
    """One daily close stored for a symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    price_date: date
    close_price: Decimal
    source: str | None = None

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("price_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: object) -> object:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @field_serializer("close_price", when_used="json")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal to string."""
        return str(value)


__all__ = ["PriceObservation"]
