"""U.S. equity market trading calendar."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from functools import lru_cache

from pricegap.core.exceptions import InvalidDateRangeError

DateLike = date | datetime | str

_MONDAY = 0
_THURSDAY = 3
_FRIDAY = 4
_SATURDAY = 5
_SUNDAY = 6
_WEEKEND = frozenset({_SATURDAY, _SUNDAY})


def normalize_date(value: DateLike) -> date:
    """Return the calendar date of ``value``.

    Accepts ``date``, ``datetime`` (the time part is dropped without timezone
    conversion) and ISO strings such as ``2024-01-05`` or
    ``2024-01-05T16:00:00Z``.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip().split("T", 1)[0].split(" ", 1)[0]
        try:
            return date.fromisoformat(text)
        except ValueError as exc:
            raise InvalidDateRangeError(f"Unparseable date: {value!r}", start=value) from exc
    raise InvalidDateRangeError(f"Unsupported date value: {value!r}", start=value)


def _nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + 7 * (n - 1))


def _last_weekday(year: int, month: int, weekday: int) -> date:
    next_month = date(year + month // 12, month % 12 + 1, 1)
    last = next_month - timedelta(days=1)
    return last - timedelta(days=(last.weekday() - weekday) % 7)


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (anonymous computus)."""

    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def market_holidays(year: int, *, include_good_friday: bool = False) -> dict[date, str]:
    """Return every market holiday date of ``year`` with its name.

    Fixed-date holidays are listed on their nominal date and, where the rules
    call for it, on their observed weekday as well. A Saturday New Year's Day
    has no observed day.
    """

    holidays: dict[date, str] = {}

    def add(day: date, name: str) -> None:
        holidays.setdefault(day, name)

    new_year = date(year, 1, 1)
    add(new_year, "New Year's Day")
    if new_year.weekday() == _SUNDAY:
        add(date(year, 1, 2), "New Year's Day (observed)")

    add(_nth_weekday(year, 1, _MONDAY, 3), "Martin Luther King Jr. Day")
    add(_nth_weekday(year, 2, _MONDAY, 3), "Presidents' Day")
    if include_good_friday:
        add(easter_sunday(year) - timedelta(days=2), "Good Friday")
    add(_last_weekday(year, 5, _MONDAY), "Memorial Day")

    juneteenth = date(year, 6, 19)
    add(juneteenth, "Juneteenth")
    if juneteenth.weekday() == _SUNDAY:
        add(juneteenth + timedelta(days=1), "Juneteenth (observed)")

    for nominal, name in ((date(year, 7, 4), "Independence Day"), (date(year, 12, 25), "Christmas Day")):
        add(nominal, name)
        if nominal.weekday() == _SATURDAY:
            add(nominal - timedelta(days=1), f"{name} (observed)")
        elif nominal.weekday() == _SUNDAY:
            add(nominal + timedelta(days=1), f"{name} (observed)")

    add(_nth_weekday(year, 9, _MONDAY, 1), "Labor Day")
    add(_nth_weekday(year, 11, _THURSDAY, 4), "Thanksgiving Day")

    return dict(sorted(holidays.items()))


@lru_cache(maxsize=128)
def _holiday_dates(year: int, include_good_friday: bool) -> frozenset[date]:
    return frozenset(market_holidays(year, include_good_friday=include_good_friday))


def is_weekend(day: DateLike) -> bool:
    return normalize_date(day).weekday() in _WEEKEND


def is_market_holiday(day: DateLike, *, include_good_friday: bool = False) -> bool:
    current = normalize_date(day)
    return current in _holiday_dates(current.year, include_good_friday)


def is_business_day(day: DateLike, *, include_good_friday: bool = False) -> bool:
    current = normalize_date(day)
    return not is_weekend(current) and not is_market_holiday(current, include_good_friday=include_good_friday)


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise InvalidDateRangeError(f"start {start} is after end {end}", start=start, end=end)


def iter_dates(start: DateLike, end: DateLike) -> Iterator[date]:
    """Yield every calendar date from ``start`` to ``end`` inclusive."""

    current, last = normalize_date(start), normalize_date(end)
    _check_range(current, last)
    while current <= last:
        yield current
        current += timedelta(days=1)


def business_days(start: DateLike, end: DateLike, *, include_good_friday: bool = False) -> list[date]:
    return [day for day in iter_dates(start, end) if is_business_day(day, include_good_friday=include_good_friday)]


@dataclass(frozen=True)
class USMarketCalendar:
    """Injectable calendar bound to one holiday configuration."""

    include_good_friday: bool = False

    def holidays(self, year: int) -> dict[date, str]:
        return market_holidays(year, include_good_friday=self.include_good_friday)

    def is_weekend(self, day: DateLike) -> bool:
        return is_weekend(day)

    def is_market_holiday(self, day: DateLike) -> bool:
        return is_market_holiday(day, include_good_friday=self.include_good_friday)

    def is_business_day(self, day: DateLike) -> bool:
        return is_business_day(day, include_good_friday=self.include_good_friday)

    def is_expected_gap(self, day: DateLike) -> bool:
        """Weekend or holiday: a date on which no observation is expected."""
        return not self.is_business_day(day)

    def business_days(self, start: DateLike, end: DateLike) -> list[date]:
        return business_days(start, end, include_good_friday=self.include_good_friday)


DEFAULT_CALENDAR = USMarketCalendar()


__all__ = [
    "DEFAULT_CALENDAR",
    "DateLike",
    "USMarketCalendar",
    "business_days",
    "easter_sunday",
    "is_business_day",
    "is_market_holiday",
    "is_weekend",
    "iter_dates",
    "market_holidays",
    "normalize_date",
]
