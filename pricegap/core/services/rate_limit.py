"""Shared request budget for the external price provider."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import date, datetime, timedelta
from typing import Any

from pricegap.core.config import get_settings
from pricegap.core.data.repositories import CallLedger
from pricegap.core.exceptions import RateLimitError
from pricegap.core.logging import logger


class RateBudget:
    """Daily call cap plus a minimum spacing between calls.

    ``acquire`` waits until ``min_interval`` seconds have passed since the
    previous grant and raises ``RateLimitError`` once ``daily_limit`` grants
    were made today. The counter resets when the date changes. With a
    ``ledger`` the count is read from and written to durable storage, so
    separate processes sharing the ledger draw on the same daily cap.
    """

    def __init__(
        self,
        daily_limit: int = 25,
        min_interval: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        ledger: CallLedger | None = None,
    ) -> None:
        if daily_limit < 1:
            raise ValueError("daily_limit must be positive")
        self.daily_limit = daily_limit
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._today = today
        self._now = now
        self._sleep = sleep
        self._ledger = ledger
        self._lock = asyncio.Lock()
        self._day = today()
        self._used = 0
        self._last_grant: float | None = None

    def _roll_day(self) -> None:
        current = self._today()
        if current != self._day:
            self._day = current
            self._used = 0

    @property
    def used(self) -> int:
        self._roll_day()
        return self._used

    @property
    def remaining(self) -> int:
        return max(0, self.daily_limit - self.used)

    def seconds_until_reset(self) -> int:
        now = self._now()
        tomorrow = datetime.combine(now.date() + timedelta(days=1), datetime.min.time(), tzinfo=now.tzinfo)
        return max(1, int((tomorrow - now).total_seconds()))

    async def acquire(self, provider: str = "alpha_vantage") -> None:
        async with self._lock:
            self._roll_day()
            if self._ledger is not None:
                self._used = self._ledger.calls(provider, self._day)
            if self._used >= self.daily_limit:
                retry_after = self.seconds_until_reset()
                logger.warning("Daily provider budget exhausted", provider=provider, retry_after=retry_after)
                raise RateLimitError(
                    f"Daily limit of {self.daily_limit} {provider} calls reached",
                    provider,
                    retry_after=retry_after,
                    details={"daily_limit": self.daily_limit},
                )
            if self._last_grant is not None:
                wait = self.min_interval - (self._clock() - self._last_grant)
                if wait > 0:
                    await self._sleep(wait)
            if self._ledger is not None:
                self._used = self._ledger.record(provider, self._day)
            else:
                self._used += 1
            self._last_grant = self._clock()

    def snapshot(self) -> dict[str, Any]:
        return {
            "day": self._day.isoformat(),
            "daily_limit": self.daily_limit,
            "used": self.used,
            "remaining": self.remaining,
            "min_interval": self.min_interval,
        }


_shared_budget: RateBudget | None = None


def get_rate_budget() -> RateBudget:
    """Return the process-wide budget, built from settings on first use."""

    global _shared_budget
    if _shared_budget is None:
        settings = get_settings().backfill
        _shared_budget = RateBudget(settings.daily_call_budget, settings.inter_call_delay)
    return _shared_budget


def reset_rate_budget() -> None:
    global _shared_budget
    _shared_budget = None


__all__ = ["RateBudget", "get_rate_budget", "reset_rate_budget"]
