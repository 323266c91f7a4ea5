"""Price fetch provider contract."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


class FetchResult(BaseModel):
    """Outcome of one provider fetch call."""

    model_config = ConfigDict(frozen=True)

    success: bool
    prices_added: int = 0
    errors: tuple[str, ...] = ()


@runtime_checkable
class PriceFetchProvider(Protocol):
    """Fetches daily closes for a range and persists them in the observation store."""

    name: str

    async def fetch_range(self, symbols: Sequence[str], start: date, end: date) -> FetchResult: ...


__all__ = ["FetchResult", "PriceFetchProvider"]
