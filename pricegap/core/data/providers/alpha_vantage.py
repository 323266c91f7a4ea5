"""Alpha Vantage daily price provider."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

import aiohttp

from pricegap.core.data.providers.base import FetchResult
from pricegap.core.data.repositories import ObservationStore
from pricegap.core.exceptions import NetworkError, PriceGapError, ProviderError, RateLimitError, format_error
from pricegap.core.logging import logger
from pricegap.core.models import PriceObservation

SessionFactory = Callable[[], aiohttp.ClientSession]

# compact responses only carry the latest 100 data points
COMPACT_WINDOW_DAYS = 100


class AlphaVantageFetcher:
    """Fetch ``TIME_SERIES_DAILY`` closes and upsert them into the store."""

    name = "alpha_vantage"
    BASE_URL = "https://www.alphavantage.co/query"

    def __init__(
        self,
        api_key: str,
        store: ObservationStore,
        *,
        session_factory: SessionFactory | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        today: Callable[[], date] = date.today,
    ) -> None:
        if not api_key:
            raise ProviderError("Alpha Vantage API key is not configured", self.name)
        self.api_key = api_key
        self._store = store
        self._session_factory = session_factory or (
            lambda: aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout))
        )
        self._base_url = base_url or self.BASE_URL
        self._today = today

    async def fetch_range(self, symbols: Sequence[str], start: date, end: date) -> FetchResult:
        """Fetch every symbol for ``[start, end]``.

        Per-symbol failures are reported in ``errors``; the result is only
        unsuccessful when no symbol could be fetched.
        """

        prices_added = 0
        errors: list[str] = []
        succeeded = 0
        for symbol in symbols:
            try:
                prices_added += await self._fetch_symbol(symbol, start, end)
                succeeded += 1
            except PriceGapError as exc:
                logger.warning("Alpha Vantage fetch failed", symbol=symbol, error_code=exc.error_code)
                errors.append(f"{symbol}: {format_error(exc)}")
        return FetchResult(success=succeeded > 0 or not symbols, prices_added=prices_added, errors=tuple(errors))

    def output_size(self, start: date) -> str:
        return "full" if (self._today() - start).days > COMPACT_WINDOW_DAYS else "compact"

    async def _fetch_symbol(self, symbol: str, start: date, end: date) -> int:
        payload = await self._request_series(symbol, self.output_size(start))
        observations = self._parse_daily_series(symbol, payload, start, end)
        written = await self._store.write_many(observations)
        logger.info("Stored Alpha Vantage prices", symbol=symbol, prices_added=written)
        return written

    async def _request_series(self, symbol: str, output_size: str) -> dict[str, Any]:
        params = {
            "function": "TIME_SERIES_DAILY",
            "symbol": symbol,
            "outputsize": output_size,
            "apikey": self.api_key,
        }
        try:
            async with self._session_factory() as session, session.get(self._base_url, params=params) as response:
                if response.status != 200:
                    raise NetworkError(
                        f"Alpha Vantage returned HTTP {response.status}",
                        self.name,
                        status_code=response.status,
                    )
                return await response.json(content_type=None)
        except aiohttp.ClientError as exc:
            raise NetworkError(f"Alpha Vantage request failed: {exc}", self.name) from exc
        except TimeoutError as exc:
            raise NetworkError("Alpha Vantage request timed out", self.name) from exc

    def _parse_daily_series(
        self,
        symbol: str,
        payload: dict[str, Any],
        start: date,
        end: date,
    ) -> list[PriceObservation]:
        if "Error Message" in payload:
            raise ProviderError(str(payload["Error Message"]), self.name, details={"symbol": symbol})
        for key in ("Note", "Information"):
            if key in payload:
                raise RateLimitError(str(payload[key]), self.name, details={"symbol": symbol})

        series = payload.get("Time Series (Daily)")
        if not isinstance(series, dict):
            raise ProviderError("Alpha Vantage response has no daily series", self.name, details={"symbol": symbol})

        observations: list[PriceObservation] = []
        for day_text, values in series.items():
            try:
                day = date.fromisoformat(day_text)
            except ValueError:
                continue
            if not start <= day <= end:
                continue
            try:
                close = Decimal(str(values["4. close"]))
            except (KeyError, TypeError, InvalidOperation):
                continue
            observations.append(
                PriceObservation(symbol=symbol, price_date=day, close_price=close, source=self.name)
            )
        observations.sort(key=lambda item: item.price_date)
        return observations


__all__ = ["AlphaVantageFetcher", "COMPACT_WINDOW_DAYS"]
