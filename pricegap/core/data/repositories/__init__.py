"""Persistence adapters."""

from pricegap.core.data.repositories.observations import DuckDBObservationStore, ObservationStore
from pricegap.core.data.repositories.provider_calls import CallLedger, DuckDBCallLedger

__all__ = ["CallLedger", "DuckDBCallLedger", "DuckDBObservationStore", "ObservationStore"]
