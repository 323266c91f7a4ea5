"""JSON logging on top of loguru with per-operation trace ids.

Every record carries ``trace_id``, ``operation``, ``symbol`` and
``error_code`` at the top level; any other bound value lands under
``context``. Values bound with :func:`log_context` apply to every record
emitted inside the block, including records from awaited coroutines.
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import IO, Any, Iterator
from uuid import uuid4

from loguru import logger

from pricegap.core.logging.config import LogConfig

_trace_id: ContextVar[str | None] = ContextVar("pricegap_trace_id", default=None)
_bound: ContextVar[dict[str, Any]] = ContextVar("pricegap_bound", default={})

TOP_LEVEL_FIELDS = ("trace_id", "operation", "symbol", "error_code")


def current_trace_id() -> str:
    """Trace id of the active context; one is created on first use."""

    trace_id = _trace_id.get()
    if trace_id is None:
        trace_id = uuid4().hex
        _trace_id.set(trace_id)
    return trace_id


def _enrich(record: dict[str, Any]) -> None:
    extra = record["extra"]
    if not extra.get("trace_id"):
        extra["trace_id"] = current_trace_id()
    for key, value in _bound.get().items():
        if extra.get(key) is None:
            extra[key] = value
    for key in TOP_LEVEL_FIELDS:
        extra.setdefault(key, None)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return str(value)


def render_record(record: dict[str, Any]) -> str:
    """Render a loguru record as one JSON line (without the newline)."""

    extra = record["extra"]
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
    }
    payload.update({key: extra.get(key) for key in TOP_LEVEL_FIELDS})
    context = {key: value for key, value in extra.items() if key not in TOP_LEVEL_FIELDS}
    if context:
        payload["context"] = context
    exception = record["exception"]
    if exception is not None:
        payload["exception"] = f"{exception.type.__name__}: {exception.value}" if exception.type else None
    return json.dumps(payload, default=_jsonable)


class JsonLineSink:
    """loguru sink appending JSON lines to a text stream or a file."""

    def __init__(self, *, stream: IO[str] | None = None, path: str | Path | None = None) -> None:
        if (stream is None) == (path is None):
            raise ValueError("JsonLineSink needs exactly one of stream or path")
        self._stream = stream
        self._path = Path(path) if path is not None else None
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, message: Any) -> None:
        line = render_record(message.record) + "\n"
        if self._stream is not None:
            self._stream.write(line)
            self._stream.flush()
            return
        with self._path.open("a", encoding="utf-8") as handle:  # type: ignore[union-attr]
            handle.write(line)


def apply_config(config: LogConfig) -> None:
    """Replace all loguru handlers with the sinks described by ``config``."""

    handlers: list[dict[str, Any]] = []
    if config.console:
        # stdout belongs to command output
        handlers.append({"sink": JsonLineSink(stream=config.stream or sys.stderr), "level": config.level.upper()})
    if config.file_path:
        handlers.append({"sink": JsonLineSink(path=config.file_path), "level": config.level.upper()})
    logger.configure(handlers=handlers, patcher=_enrich, extra=dict(config.static_fields))


def configure_logging(level: str = "INFO", **options: Any) -> None:
    """Shortcut for ``apply_config(LogConfig(level=level, **options))``."""

    apply_config(LogConfig(level=level, **options))


@contextmanager
def log_context(*, trace_id: str | None = None, **fields: Any) -> Iterator[str]:
    """Bind ``fields`` and a trace id to every record emitted inside the block.

    A fresh trace id is generated unless one is passed; pass
    ``current_trace_id()`` to join the enclosing trace.
    """

    active = trace_id or uuid4().hex
    trace_token = _trace_id.set(active)
    bound_token = _bound.set({**_bound.get(), **fields})
    try:
        yield active
    finally:
        _bound.reset(bound_token)
        _trace_id.reset(trace_token)


def get_logger(component: str | None = None) -> Any:
    """The shared logger, optionally tagged with ``component``."""

    return logger.bind(component=component) if component else logger


class StructuredLogger:
    """Owns a :class:`LogConfig` and applies it to the shared loguru logger."""

    def __init__(self, config: LogConfig | None = None) -> None:
        self.config = config or LogConfig()
        self.logger = logger
        apply_config(self.config)

    def configure(self, **changes: Any) -> None:
        self.config = self.config.model_copy(update=changes)
        apply_config(self.config)

    @contextmanager
    def context(self, *, trace_id: str | None = None, **fields: Any) -> Iterator[str]:
        with log_context(trace_id=trace_id, **fields) as active:
            yield active


configure_logging()


__all__ = [
    "JsonLineSink",
    "StructuredLogger",
    "TOP_LEVEL_FIELDS",
    "apply_config",
    "configure_logging",
    "current_trace_id",
    "get_logger",
    "log_context",
    "logger",
    "render_record",
]
