"""Price fetch providers."""

from pricegap.core.data.providers.alpha_vantage import AlphaVantageFetcher
from pricegap.core.data.providers.base import FetchResult, PriceFetchProvider

__all__ = ["AlphaVantageFetcher", "FetchResult", "PriceFetchProvider"]
