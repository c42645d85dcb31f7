"""Engine-specific exceptions for loadgen.

Only ``InvalidConfigError`` and ``EngineError`` ever cross the engine
boundary. ``WorkerSetupError`` is raised and absorbed inside a single worker.
"""

from __future__ import annotations

from typing import Any

from loadgen.exceptions.base import LoadgenError, ValidationError


class InvalidConfigError(ValidationError):
    """Raised by the validators when a run configuration is malformed."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        *,
        code: str = "INVALID_CONFIG",
    ) -> None:
        super().__init__(code, message, details)


class EngineError(LoadgenError):
    """Raised when the worker pool itself cannot be started."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        *,
        code: str = "ENGINE_START_FAILED",
    ) -> None:
        super().__init__(code, message, details)


class WorkerSetupError(LoadgenError):
    """A single worker could not open its send socket."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        *,
        code: str = "WORKER_SETUP_FAILED",
    ) -> None:
        super().__init__(code, message, details)
