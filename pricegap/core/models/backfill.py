"""Backfill progress and result models."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from pricegap.core.exceptions import InvalidTransitionError
from pricegap.core.models.coverage import SymbolCoverage
from pricegap.core.models.quality import DateQuality


class BackfillStatus(str, Enum):
    """State of one symbol inside a bulk backfill run."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (BackfillStatus.COMPLETED, BackfillStatus.ERROR)


_TRANSITIONS: dict[BackfillStatus, frozenset[BackfillStatus]] = {
    BackfillStatus.PENDING: frozenset({BackfillStatus.PROCESSING}),
    BackfillStatus.PROCESSING: frozenset({BackfillStatus.COMPLETED, BackfillStatus.ERROR}),
    BackfillStatus.COMPLETED: frozenset(),
    BackfillStatus.ERROR: frozenset(),
}


class BulkBackfillProgress(BaseModel):
    """Progress row of one symbol in a bulk run.

    Rows only move forward: pending -> processing -> completed | error. Every
    row passes through processing before it reaches a terminal status.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    status: BackfillStatus = BackfillStatus.PENDING
    error: str | None = None
    prices_added: int = 0

    def transition(
        self,
        target: BackfillStatus,
        *,
        error: str | None = None,
        prices_added: int | None = None,
    ) -> BulkBackfillProgress:
        """Return a copy moved to ``target``; invalid moves raise ``InvalidTransitionError``."""
        if target not in _TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.symbol, self.status.value, target.value)
        update: dict[str, object] = {"status": target, "error": error}
        if prices_added is not None:
            update["prices_added"] = prices_added
        return self.model_copy(update=update)


class BackfillResult(BaseModel):
    """Outcome of a single-symbol range backfill."""

    symbol: str
    start: date
    end: date
    success: bool
    prices_added: int = 0
    errors: list[str] = Field(default_factory=list)
    skipped: bool = False
    coverage: SymbolCoverage | None = None
    quality_map: dict[date, DateQuality] | None = None

    @property
    def partial(self) -> bool:
        """Some prices were written but the provider also reported errors."""
        return self.success and bool(self.errors)

    @property
    def status(self) -> BackfillStatus:
        return BackfillStatus.COMPLETED if self.success else BackfillStatus.ERROR

    @property
    def error_message(self) -> str | None:
        return "; ".join(self.errors) if self.errors else None


class BulkBackfillResult(BaseModel):
    """Aggregated outcome of a bulk backfill run."""

    operation_id: str
    start: date
    end: date
    rows: list[BulkBackfillProgress]
    results: dict[str, BackfillResult] = Field(default_factory=dict)

    @property
    def completed(self) -> list[str]:
        return [row.symbol for row in self.rows if row.status is BackfillStatus.COMPLETED]

    @property
    def failed(self) -> list[str]:
        return [row.symbol for row in self.rows if row.status is BackfillStatus.ERROR]

    @property
    def prices_added(self) -> int:
        return sum(row.prices_added for row in self.rows)

    @property
    def errors(self) -> dict[str, str]:
        return {row.symbol: row.error or "unknown error" for row in self.rows if row.status is BackfillStatus.ERROR}

    def summary(self) -> str:
        total = len(self.rows)
        if not self.failed:
            return f"{total} of {total} symbols backfilled, {self.prices_added} prices added"
        details = ", ".join(f"{symbol} ({message})" for symbol, message in self.errors.items())
        return f"{len(self.failed)} of {total} symbols failed: {details}"


__all__ = [
    "BackfillResult",
    "BackfillStatus",
    "BulkBackfillProgress",
    "BulkBackfillResult",
]
