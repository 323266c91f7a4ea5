"""Wiring of store, analyzer and orchestrator for CLI commands."""

from __future__ import annotations

from pricegap.core.config import PriceGapSettings
from pricegap.core.data.providers import AlphaVantageFetcher
from pricegap.core.data.repositories import DuckDBCallLedger, DuckDBObservationStore
from pricegap.core.data.storage import DuckDBFactoryConfig, PriceGapDuckDBFactory
from pricegap.core.exceptions import ProviderError
from pricegap.core.services import BackfillOrchestrator, CoverageAnalyzer, RateBudget, USMarketCalendar


def build_store(settings: PriceGapSettings) -> DuckDBObservationStore:
    factory = PriceGapDuckDBFactory(DuckDBFactoryConfig.from_settings(settings.storage))
    return DuckDBObservationStore(factory.create_connection())


def build_analyzer(settings: PriceGapSettings, store: DuckDBObservationStore | None = None) -> CoverageAnalyzer:
    return CoverageAnalyzer(
        store or build_store(settings),
        calendar=USMarketCalendar(include_good_friday=settings.calendar.include_good_friday),
        fallback_days=settings.backfill.default_window_days,
    )


def build_budget(settings: PriceGapSettings, store: DuckDBObservationStore) -> RateBudget:
    """Daily call budget whose count lives in the same database as the prices."""

    return RateBudget(
        settings.backfill.daily_call_budget,
        settings.backfill.inter_call_delay,
        ledger=DuckDBCallLedger(store.connection),
    )


def build_orchestrator(settings: PriceGapSettings) -> BackfillOrchestrator:
    provider = settings.provider
    if provider.name != AlphaVantageFetcher.name:
        raise ProviderError(f"Unsupported price provider: {provider.name}", provider.name)
    store = build_store(settings)
    fetcher = AlphaVantageFetcher(
        provider.api_key or "",
        store,
        base_url=provider.base_url,
        timeout=provider.timeout,
    )
    return BackfillOrchestrator(
        fetcher,
        build_analyzer(settings, store),
        budget=build_budget(settings, store),
        settings=settings.backfill,
    )


__all__ = ["build_analyzer", "build_budget", "build_orchestrator", "build_store"]
