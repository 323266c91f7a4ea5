from __future__ import annotations

from datetime import date, datetime

import duckdb
import pytest

from pricegap.core.config import reset_settings
from pricegap.core.data.repositories import DuckDBCallLedger
from pricegap.core.exceptions import RateLimitError
from pricegap.core.services.rate_limit import RateBudget, get_rate_budget, reset_rate_budget


class ManualClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.day = date(2024, 1, 2)

    def monotonic(self) -> float:
        return self.now

    def today(self) -> date:
        return self.day

    def wall(self) -> datetime:
        return datetime(self.day.year, self.day.month, self.day.day, 18, 0)


def _budget(clock: ManualClock, fake_sleep, **kwargs) -> RateBudget:
    return RateBudget(
        clock=clock.monotonic,
        today=clock.today,
        now=clock.wall,
        sleep=fake_sleep,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_acquire_spaces_consecutive_calls(fake_sleep) -> None:
    clock = ManualClock()
    budget = _budget(clock, fake_sleep, daily_limit=5, min_interval=1.0)

    await budget.acquire()
    await budget.acquire()
    clock.now += 5.0
    await budget.acquire()

    assert fake_sleep.calls == [1.0]
    assert budget.used == 3
    assert budget.remaining == 2


@pytest.mark.asyncio
async def test_daily_limit_raises_rate_limit_error(fake_sleep) -> None:
    clock = ManualClock()
    budget = _budget(clock, fake_sleep, daily_limit=2, min_interval=0.0)

    await budget.acquire("alpha_vantage")
    await budget.acquire("alpha_vantage")
    with pytest.raises(RateLimitError) as excinfo:
        await budget.acquire("alpha_vantage")

    assert excinfo.value.error_code == "RATE_LIMIT"
    assert excinfo.value.provider_name == "alpha_vantage"
    assert excinfo.value.retry_after == 6 * 3600
    assert budget.remaining == 0


@pytest.mark.asyncio
async def test_counter_resets_on_new_day(fake_sleep) -> None:
    clock = ManualClock()
    budget = _budget(clock, fake_sleep, daily_limit=1, min_interval=0.0)

    await budget.acquire()
    clock.day = date(2024, 1, 3)

    assert budget.remaining == 1
    await budget.acquire()
    assert budget.snapshot()["day"] == "2024-01-03"


@pytest.mark.asyncio
async def test_ledger_count_carries_over_to_a_new_budget(
    duckdb_connection: duckdb.DuckDBPyConnection,
    fake_sleep,
) -> None:
    clock = ManualClock()
    first = _budget(clock, fake_sleep, daily_limit=2, min_interval=0.0, ledger=DuckDBCallLedger(duckdb_connection))
    await first.acquire("alpha_vantage")
    await first.acquire("alpha_vantage")

    second = _budget(clock, fake_sleep, daily_limit=2, min_interval=0.0, ledger=DuckDBCallLedger(duckdb_connection))
    with pytest.raises(RateLimitError):
        await second.acquire("alpha_vantage")

    assert second.used == 2
    clock.day = date(2024, 1, 3)
    await second.acquire("alpha_vantage")
    assert DuckDBCallLedger(duckdb_connection).calls("alpha_vantage", date(2024, 1, 3)) == 1


def test_invalid_limit_is_rejected() -> None:
    with pytest.raises(ValueError):
        RateBudget(daily_limit=0)


def test_shared_budget_comes_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRICEGAP_BACKFILL__DAILY_CALL_BUDGET", "7")
    reset_settings()
    reset_rate_budget()

    budget = get_rate_budget()

    assert budget is get_rate_budget()
    assert budget.daily_limit == 7
