"""Console logger backed by loguru.

Keyword fields are bound into ``record["extra"]`` (so extra sinks can consume
them as structured data) and also rendered as ``key=value`` pairs after the
event name for the human-readable stderr sink.
"""

from __future__ import annotations

import sys
from typing import Any

from loguru import logger as _loguru

from loadgen.logger.base import Logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "{extra[logger_name]} | {message}"
)

_loguru.configure(extra={"logger_name": "loadgen"})


def configure_logging(level: str = "INFO") -> int:
    """Replace all loguru sinks with a single stderr sink at *level*.

    Returns the new sink id so callers (tests) can remove it again.
    """
    resolved = _loguru.level(level.upper()).name
    _loguru.remove()
    return _loguru.add(sys.stderr, level=resolved, format=_FORMAT)


def _render(message: str, fields: dict[str, Any]) -> str:
    parts = [message]
    for key, value in fields.items():
        if key == "event" and value == message:
            continue
        parts.append(f"{key}={value}")
    return " ".join(parts)


class ConsoleLogger(Logger):
    def __init__(self, name: str = "loadgen") -> None:
        self.name = name
        self._logger = _loguru.bind(logger_name=name)

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        # depth=2 attributes the record to the caller of info()/warning()/...
        self._logger.bind(**fields).opt(depth=2).log(level, _render(message, fields))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._emit("DEBUG", message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("INFO", message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("WARNING", message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("ERROR", message, kwargs)
