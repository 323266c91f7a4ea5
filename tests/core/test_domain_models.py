from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pricegap.core.exceptions import InvalidTransitionError
from pricegap.core.models import (
    BackfillResult,
    BackfillStatus,
    BulkBackfillProgress,
    DateQuality,
    DateWindow,
    PriceObservation,
)


def test_date_quality_constructors() -> None:
    real = DateQuality.real("185.64", "alpha_vantage")

    assert real.has_data and real.is_real
    assert real.price == Decimal("185.64")
    assert DateQuality.real(1, None).source_label == "Unknown"
    assert DateQuality.expected_gap().has_data is True
    assert DateQuality.missing().has_data is False
    assert DateQuality.missing().source_label is None


@pytest.mark.parametrize(
    "payload",
    [
        {"has_data": True, "quality": 0.5},
        {"has_data": True, "quality": 0.0},
        {"has_data": False, "quality": 1.0},
        {"has_data": True, "quality": 0.7, "price": "10"},
        {"has_data": False, "quality": 0.0, "source": "manual"},
    ],
)
def test_date_quality_invariant_is_enforced(payload: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        DateQuality(**payload)


def test_date_window_rejects_inverted_bounds() -> None:
    with pytest.raises(ValidationError):
        DateWindow(start=date(2024, 1, 2), end=date(2024, 1, 1))


def test_price_observation_normalizes_input() -> None:
    observation = PriceObservation(symbol=" vti ", price_date="2024-01-05T16:00:00", close_price="230.1")

    assert observation.symbol == "VTI"
    assert observation.price_date == date(2024, 1, 5)
    assert observation.model_dump(mode="json")["close_price"] == "230.1"


def test_progress_moves_forward_only() -> None:
    row = BulkBackfillProgress(symbol="AAPL")

    processing = row.transition(BackfillStatus.PROCESSING)
    done = processing.transition(BackfillStatus.COMPLETED, prices_added=3)

    assert row.status is BackfillStatus.PENDING
    assert done.status is BackfillStatus.COMPLETED
    assert done.prices_added == 3
    assert done.status.is_terminal
    with pytest.raises(InvalidTransitionError):
        row.transition(BackfillStatus.COMPLETED)
    with pytest.raises(InvalidTransitionError):
        done.transition(BackfillStatus.ERROR, error="late failure")


def test_pending_row_cannot_skip_processing() -> None:
    row = BulkBackfillProgress(symbol="AAPL")

    with pytest.raises(InvalidTransitionError):
        row.transition(BackfillStatus.ERROR, error="cancelled")
    with pytest.raises(InvalidTransitionError):
        row.transition(BackfillStatus.COMPLETED)

    failed = row.transition(BackfillStatus.PROCESSING).transition(BackfillStatus.ERROR, error="cancelled")
    assert failed.error == "cancelled"


def test_backfill_result_flags() -> None:
    partial = BackfillResult(symbol="AAPL", start=date(2024, 1, 2), end=date(2024, 1, 3), success=True, errors=["x"])
    failed = BackfillResult(symbol="AAPL", start=date(2024, 1, 2), end=date(2024, 1, 3), success=False, errors=["a", "b"])

    assert partial.partial is True
    assert partial.status is BackfillStatus.COMPLETED
    assert failed.partial is False
    assert failed.status is BackfillStatus.ERROR
    assert failed.error_message == "a; b"
