"""Monitoring helpers."""

from pricegap.core.monitoring.metrics import BackfillMetrics

__all__ = ["BackfillMetrics"]
