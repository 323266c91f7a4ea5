"""Rate-limited backfill of missing price observations."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from datetime import date
from typing import Any
from uuid import uuid4

from pricegap.core.config import BackfillSettings, get_settings
from pricegap.core.data.providers import FetchResult, PriceFetchProvider
from pricegap.core.exceptions import InvalidDateRangeError, PriceGapError, ProviderError, format_error
from pricegap.core.logging import current_trace_id, log_context, logger
from pricegap.core.models import (
    BackfillResult,
    BackfillStatus,
    BulkBackfillProgress,
    BulkBackfillResult,
    DateWindow,
    QualityMap,
    SymbolCoverage,
)
from pricegap.core.monitoring import BackfillMetrics
from pricegap.core.services.analysis import CoverageAnalyzer
from pricegap.core.services.calendars import DateLike, normalize_date
from pricegap.core.services.quality import missing_dates, summarize
from pricegap.core.services.rate_limit import RateBudget, get_rate_budget
from pricegap.core.services.session import AnalysisSession

ProgressCallback = Callable[[BulkBackfillProgress], None]
SleepFn = Callable[[float], Awaitable[Any]]


def _normalize_symbols(symbols: Iterable[str]) -> list[str]:
    ordered: list[str] = []
    for symbol in symbols:
        symbol = symbol.strip().upper()
        if symbol and symbol not in ordered:
            ordered.append(symbol)
    return ordered


def _validated_range(start: DateLike, end: DateLike) -> tuple[date, date]:
    first, last = normalize_date(start), normalize_date(end)
    if first > last:
        raise InvalidDateRangeError(f"start {first} is after end {last}", start=first, end=last)
    return first, last


class BulkBackfillHandle:
    """Observable state of a running bulk backfill.

    The run continues whether or not anyone keeps the handle.
    """

    def __init__(self, symbols: list[str], start: date, end: date, *, operation_id: str | None = None) -> None:
        self.operation_id = operation_id or uuid4().hex
        self.start = start
        self.end = end
        self._rows: dict[str, BulkBackfillProgress] = {symbol: BulkBackfillProgress(symbol=symbol) for symbol in symbols}
        self._results: dict[str, BackfillResult] = {}
        self._subscribers: list[ProgressCallback] = []
        self._task: asyncio.Task[BulkBackfillResult] | None = None

    @property
    def progress(self) -> list[BulkBackfillProgress]:
        return list(self._rows.values())

    @property
    def task(self) -> asyncio.Task[BulkBackfillResult] | None:
        return self._task

    @property
    def done(self) -> bool:
        return all(row.status.is_terminal for row in self._rows.values())

    def subscribe(self, callback: ProgressCallback) -> Callable[[], None]:
        """Call ``callback`` with every row change; returns an unsubscribe function."""

        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def result(self) -> BulkBackfillResult:
        return BulkBackfillResult(
            operation_id=self.operation_id,
            start=self.start,
            end=self.end,
            rows=self.progress,
            results=dict(self._results),
        )

    async def wait(self) -> BulkBackfillResult:
        """Wait for the run to finish and return its result."""

        if self._task is not None:
            try:
                await asyncio.shield(self._task)
            except asyncio.CancelledError:
                if not self._task.cancelled():
                    raise
        return self.result()

    def _move(self, symbol: str, target: BackfillStatus, **changes: Any) -> None:
        row = self._rows[symbol].transition(target, **changes)
        self._rows[symbol] = row
        for callback in list(self._subscribers):
            try:
                callback(row)
            except Exception:
                logger.exception("Bulk progress subscriber failed", symbol=symbol)

    def _record(self, result: BackfillResult) -> None:
        self._results[result.symbol] = result

    def _fail_unfinished(self, message: str) -> None:
        for symbol, row in list(self._rows.items()):
            if row.status is BackfillStatus.PENDING:
                self._move(symbol, BackfillStatus.PROCESSING)
            if not self._rows[symbol].status.is_terminal:
                self._move(symbol, BackfillStatus.ERROR, error=message)


class BackfillOrchestrator:
    """Fetches missing ranges from a provider under the shared rate budget.

    Every provider call made by one orchestrator is serialized, so a
    single-symbol backfill and a bulk run never reach the provider at the
    same time.
    """

    def __init__(
        self,
        fetcher: PriceFetchProvider,
        analyzer: CoverageAnalyzer,
        *,
        budget: RateBudget | None = None,
        session: AnalysisSession | None = None,
        settings: BackfillSettings | None = None,
        sleep: SleepFn = asyncio.sleep,
        metrics: BackfillMetrics | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.analyzer = analyzer
        self.session = session
        self.settings = settings or get_settings().backfill
        self.budget = budget or get_rate_budget()
        self.metrics = metrics
        self._sleep = sleep
        self._provider_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[BulkBackfillResult]] = set()

    async def backfill_date(self, symbol: str, day: DateLike) -> BackfillResult:
        return await self.backfill_range(symbol, day, day)

    async def backfill_range(self, symbol: str, start: DateLike, end: DateLike) -> BackfillResult:
        """Fetch ``[start, end]`` for ``symbol`` and refresh its coverage.

        Provider failures, budget exhaustion included, are reported in the
        result's ``errors`` instead of being raised.

        Raises:
            InvalidDateRangeError: ``start`` is after ``end``.
            StorageError: the stored prices for the window cannot be read.
        """

        first, last = _validated_range(start, end)
        symbol = symbol.strip().upper()

        with log_context(trace_id=current_trace_id(), operation="backfill_range", symbol=symbol):
            requested = await self.analyzer.get_quality_map(symbol, DateWindow(start=first, end=last))
            if not missing_dates(requested):
                logger.info("No missing business days, skipping provider", start=first.isoformat(), end=last.isoformat())
                coverage, quality_map, refresh_errors = await self._refresh(symbol)
                return BackfillResult(
                    symbol=symbol,
                    start=first,
                    end=last,
                    success=not refresh_errors,
                    errors=refresh_errors,
                    skipped=True,
                    coverage=coverage,
                    quality_map=quality_map,
                )

            success = False
            prices_added = 0
            errors: list[str] = []
            try:
                fetch = await self._fetch(symbol, first, last)
            except PriceGapError as exc:
                logger.warning("Backfill failed", error_code=exc.error_code)
                errors.append(format_error(exc))
            except Exception as exc:
                logger.exception("Unexpected provider failure")
                errors.append(format_error(ProviderError(str(exc) or type(exc).__name__, self.fetcher.name)))
            else:
                success = fetch.success
                prices_added = fetch.prices_added
                errors.extend(fetch.errors)
                if self.settings.settle_delay > 0:
                    await self._sleep(self.settings.settle_delay)

            if self.metrics is not None:
                self.metrics.add_prices(prices_added)
                if not success:
                    self.metrics.record_failure("range")

            coverage, quality_map, refresh_errors = await self._refresh(symbol)
            errors.extend(refresh_errors)
            logger.info("Backfill finished", success=success, prices_added=prices_added, errors=len(errors))
            return BackfillResult(
                symbol=symbol,
                start=first,
                end=last,
                success=success,
                prices_added=prices_added,
                errors=errors,
                coverage=coverage,
                quality_map=quality_map,
            )

    async def _fetch(self, symbol: str, start: date, end: date) -> FetchResult:
        async with self._provider_lock:
            try:
                await self.budget.acquire(self.fetcher.name)
            finally:
                if self.metrics is not None:
                    self.metrics.set_budget_remaining(self.budget.remaining)
            started = time.perf_counter()
            try:
                result = await self.fetcher.fetch_range([symbol], start, end)
            except Exception:
                if self.metrics is not None:
                    self.metrics.observe_call(self.fetcher.name, time.perf_counter() - started, success=False)
                raise
            if self.metrics is not None:
                self.metrics.observe_call(self.fetcher.name, time.perf_counter() - started, success=result.success)
            return result

    async def _refresh(self, symbol: str) -> tuple[SymbolCoverage | None, QualityMap | None, list[str]]:
        try:
            window = await self.analyzer.resolve_window(symbol)
            quality_map = await self.analyzer.get_quality_map(symbol, window)
        except PriceGapError as exc:
            logger.warning("Coverage refresh failed", error_code=exc.error_code)
            return None, None, [format_error(exc)]
        coverage = summarize(symbol, quality_map, calendar=self.analyzer.calendar)
        if self.session is not None:
            self.session.apply_refresh(coverage, quality_map)
        return coverage, quality_map, []

    def start_bulk_backfill(self, symbols: Iterable[str], start: DateLike, end: DateLike) -> BulkBackfillHandle:
        """Schedule a sequential backfill of ``symbols`` and return at once.

        Must be called from within a running event loop.

        Raises:
            InvalidDateRangeError: ``start`` is after ``end``.
        """

        first, last = _validated_range(start, end)
        handle = BulkBackfillHandle(_normalize_symbols(symbols), first, last)
        task = asyncio.get_running_loop().create_task(self._run_bulk(handle))
        handle._task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return handle

    async def bulk_backfill(self, symbols: Iterable[str], start: DateLike, end: DateLike) -> BulkBackfillResult:
        return await self.start_bulk_backfill(symbols, start, end).wait()

    async def _run_bulk(self, handle: BulkBackfillHandle) -> BulkBackfillResult:
        symbols = [row.symbol for row in handle.progress]
        with log_context(trace_id=handle.operation_id, operation="bulk_backfill"):
            logger.info("Bulk backfill started", symbols=len(symbols))
            try:
                for index, symbol in enumerate(symbols):
                    await self._backfill_row(handle, symbol)
                    if index < len(symbols) - 1 and self.settings.inter_call_delay > 0:
                        await self._sleep(self.settings.inter_call_delay)
            except asyncio.CancelledError:
                handle._fail_unfinished("cancelled")
                raise
            finally:
                handle._fail_unfinished("backfill interrupted")
            result = handle.result()
            logger.info("Bulk backfill finished", completed=len(result.completed), failed=len(result.failed))
            return result

    async def _backfill_row(self, handle: BulkBackfillHandle, symbol: str) -> None:
        handle._move(symbol, BackfillStatus.PROCESSING)
        try:
            result = await self.backfill_range(symbol, handle.start, handle.end)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Bulk backfill row failed", symbol=symbol)
            if self.metrics is not None:
                self.metrics.record_failure("bulk")
            handle._move(symbol, BackfillStatus.ERROR, error=format_error(exc))
            return

        handle._record(result)
        if result.success:
            handle._move(symbol, BackfillStatus.COMPLETED, prices_added=result.prices_added)
        else:
            if self.metrics is not None:
                self.metrics.record_failure("bulk")
            handle._move(
                symbol,
                BackfillStatus.ERROR,
                error=result.error_message or "backfill failed",
                prices_added=result.prices_added,
            )


__all__ = ["BackfillOrchestrator", "BulkBackfillHandle"]
