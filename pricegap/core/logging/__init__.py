"""Structured JSON logging with trace ids."""

from pricegap.core.logging.config import LogConfig
from pricegap.core.logging.logger import (
    StructuredLogger,
    apply_config,
    configure_logging,
    current_trace_id,
    get_logger,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "StructuredLogger",
    "apply_config",
    "configure_logging",
    "current_trace_id",
    "get_logger",
    "log_context",
    "logger",
]
