"""Base exception classes for loadgen.

Every error carries a machine-readable ``code``, a human-readable ``message``
and an optional ``details`` dict, so the CLI can report what was rejected and
why without parsing strings.
"""

from __future__ import annotations

from typing import Any


class LoadgenError(Exception):
    """Root of the loadgen exception hierarchy."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"


class ValidationError(LoadgenError):
    """Input failed validation."""

    pass


class ConfigurationError(LoadgenError):
    """Command-line or environment configuration is unusable."""

    pass


__all__ = [
    "LoadgenError",
    "ValidationError",
    "ConfigurationError",
]
