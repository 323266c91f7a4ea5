from __future__ import annotations

from datetime import date, datetime

import pytest

from pricegap.core.exceptions import DataValidationError, InvalidDateRangeError
from pricegap.core.services.calendars import (
    USMarketCalendar,
    business_days,
    easter_sunday,
    is_business_day,
    is_market_holiday,
    is_weekend,
    iter_dates,
    market_holidays,
    normalize_date,
)


@pytest.mark.parametrize(
    "day",
    [
        date(2024, 1, 1),  # New Year's Day
        date(2023, 1, 2),  # New Year's Day observed (Jan 1 was a Sunday)
        date(2024, 1, 15),  # MLK Day
        date(2024, 2, 19),  # Presidents' Day
        date(2024, 5, 27),  # Memorial Day
        date(2024, 6, 19),  # Juneteenth
        date(2022, 6, 20),  # Juneteenth observed
        date(2024, 7, 4),  # Independence Day
        date(2026, 7, 3),  # Independence Day observed Friday
        date(2021, 7, 5),  # Independence Day observed Monday
        date(2024, 9, 2),  # Labor Day
        date(2024, 11, 28),  # Thanksgiving
        date(2024, 12, 25),  # Christmas
        date(2021, 12, 24),  # Christmas observed Friday
        date(2022, 12, 26),  # Christmas observed Monday
    ],
)
def test_market_holidays_are_not_business_days(day: date) -> None:
    assert is_market_holiday(day)
    assert not is_business_day(day)


def test_independence_day_on_saturday_is_observed_friday() -> None:
    assert is_business_day(date(2026, 7, 2))
    assert not is_business_day(date(2026, 7, 3))
    assert is_weekend(date(2026, 7, 4))
    assert not is_business_day(date(2026, 7, 4))


def test_saturday_new_year_has_no_observed_day() -> None:
    assert is_weekend(date(2022, 1, 1))
    assert is_business_day(date(2021, 12, 31))
    assert is_business_day(date(2022, 1, 3))


def test_regular_weekdays_are_business_days() -> None:
    assert is_business_day(date(2024, 1, 2))
    assert is_business_day(date(2024, 1, 16))
    assert not is_business_day(date(2024, 1, 6))
    assert not is_business_day(date(2024, 1, 7))


def test_good_friday_is_opt_in() -> None:
    good_friday = date(2024, 3, 29)

    assert easter_sunday(2024) == date(2024, 3, 31)
    assert easter_sunday(2025) == date(2025, 4, 20)
    assert is_business_day(good_friday)
    assert not USMarketCalendar(include_good_friday=True).is_business_day(good_friday)


def test_business_day_count_for_2024() -> None:
    assert len(business_days(date(2024, 1, 1), date(2024, 12, 31))) == 253
    assert len(USMarketCalendar(include_good_friday=True).business_days(date(2024, 1, 1), date(2024, 12, 31))) == 252


def test_business_days_first_week_of_2024() -> None:
    assert business_days("2024-01-01", "2024-01-07") == [
        date(2024, 1, 2),
        date(2024, 1, 3),
        date(2024, 1, 4),
        date(2024, 1, 5),
    ]


def test_inverted_range_is_rejected() -> None:
    with pytest.raises(InvalidDateRangeError):
        business_days(date(2024, 1, 5), date(2024, 1, 1))
    with pytest.raises(InvalidDateRangeError):
        list(iter_dates(date(2024, 1, 5), date(2024, 1, 1)))


def test_market_holidays_lists_names_in_date_order() -> None:
    holidays = market_holidays(2026)

    assert list(holidays) == sorted(holidays)
    assert holidays[date(2026, 7, 3)] == "Independence Day (observed)"
    assert holidays[date(2026, 1, 1)] == "New Year's Day"
    assert len(market_holidays(2024)) == 9


def test_normalize_date_accepts_common_representations() -> None:
    assert normalize_date(date(2024, 1, 5)) == date(2024, 1, 5)
    assert normalize_date(datetime(2024, 1, 5, 23, 59)) == date(2024, 1, 5)
    assert normalize_date("2024-01-05") == date(2024, 1, 5)
    assert normalize_date("2024-01-05T16:00:00Z") == date(2024, 1, 5)


def test_normalize_date_rejects_garbage() -> None:
    with pytest.raises(DataValidationError):
        normalize_date("not-a-date")
