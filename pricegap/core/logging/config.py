"""Options for the JSON log sinks."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pricegap.core.config import LoggingSettings


class LogConfig(BaseModel):
    """Where log records go and at which level.

    Console records go to ``stream`` (stderr when unset). A ``file_path``
    adds a JSON lines file next to the console sink.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    level: str = "INFO"
    console: bool = True
    stream: Any = None
    file_path: str | None = None
    static_fields: dict[str, Any] = {}

    @field_validator("level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    @classmethod
    def from_settings(cls, settings: LoggingSettings, *, level: str | None = None) -> LogConfig:
        return cls(level=level or settings.level, file_path=settings.file_path)


__all__ = ["LogConfig"]
