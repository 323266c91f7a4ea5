"""Per-date quality classification of stored price observations."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from pricegap.core.logging import logger
from pricegap.core.models import DateQuality, PriceGap, PriceObservation, QualityMap
from pricegap.core.services.calendars import (
    DEFAULT_CALENDAR,
    DateLike,
    USMarketCalendar,
    iter_dates,
    normalize_date,
)


def build_quality_map(
    symbol: str,
    start: DateLike,
    end: DateLike,
    observations: Iterable[PriceObservation],
    *,
    calendar: USMarketCalendar | None = None,
) -> QualityMap:
    """Classify every calendar date in ``[start, end]`` for ``symbol``.

    A stored observation yields quality 1.0 with its price and source, a
    weekend or market holiday without one yields 0.7 and any other date
    yields 0.0. The result holds exactly one entry per date in ascending
    order. When two observations share a date the later one wins.

    Raises:
        InvalidDateRangeError: ``start`` is after ``end``.
    """

    calendar = calendar or DEFAULT_CALENDAR
    first, last = normalize_date(start), normalize_date(end)
    days = list(iter_dates(first, last))

    by_date: dict[date, PriceObservation] = {}
    for observation in observations:
        observed_on = normalize_date(observation.price_date)
        if first <= observed_on <= last:
            by_date[observed_on] = observation

    quality_map: QualityMap = {}
    expected_gaps = 0
    for day in days:
        observation = by_date.get(day)
        if observation is not None:
            quality_map[day] = DateQuality.real(observation.close_price, observation.source)
        elif calendar.is_expected_gap(day):
            quality_map[day] = DateQuality.expected_gap()
            expected_gaps += 1
        else:
            quality_map[day] = DateQuality.missing()

    logger.debug(
        "Built quality map",
        symbol=symbol,
        start=first.isoformat(),
        end=last.isoformat(),
        real=len(by_date),
        expected_gaps=expected_gaps,
        missing=len(days) - len(by_date) - expected_gaps,
    )
    return quality_map


def missing_dates(quality_map: QualityMap) -> list[date]:
    return [day for day, entry in quality_map.items() if entry.is_missing]


def find_price_gaps(symbol: str, quality_map: QualityMap) -> list[PriceGap]:
    """Group missing business days into contiguous gaps.

    Weekends and holidays inside a run do not split it; a real observation
    does.
    """

    gaps: list[PriceGap] = []
    run_start: date | None = None
    run_end: date | None = None
    run_length = 0

    def close_run() -> None:
        if run_start is not None and run_end is not None:
            gaps.append(PriceGap(symbol=symbol, start=run_start, end=run_end, missing_days=run_length))

    for day, entry in quality_map.items():
        if entry.is_missing:
            if run_start is None:
                run_start = day
            run_end = day
            run_length += 1
        elif entry.is_real:
            close_run()
            run_start = run_end = None
            run_length = 0
    close_run()
    return gaps


__all__ = ["build_quality_map", "find_price_gaps", "missing_dates"]
