"""Custom exceptions for loadgen.

Usage:
    from loadgen.exceptions import InvalidConfigError

    try:
        validate_udp(config)
    except InvalidConfigError as exc:
        print(exc.code, exc.details["field"])
"""

from loadgen.exceptions.base import (
    LoadgenError,
    ValidationError,
    ConfigurationError,
)
from loadgen.exceptions.engine import (
    InvalidConfigError,
    EngineError,
    WorkerSetupError,
)

__all__ = [
    "LoadgenError",
    "ValidationError",
    "ConfigurationError",
    "InvalidConfigError",
    "EngineError",
    "WorkerSetupError",
]
