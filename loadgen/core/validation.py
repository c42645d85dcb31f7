"""Config validation for both workload modes.

Validators are pure: they never block, never touch the network and either
return ``None`` or raise ``InvalidConfigError`` naming the offending field.
Host names are not resolved here; an unresolvable host is a per-worker setup
failure, not a configuration error.
"""

from __future__ import annotations

import math
import re

from loadgen.core.models import CryptoConfig, Target, UDPConfig
from loadgen.exceptions import InvalidConfigError

_PORT_RE = re.compile(r"[+-]?[0-9]+")

_MIN_PORT = 1
_MAX_PORT = 65535


def _require_positive_int(field: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigError(
            f"{field} must be an integer",
            {"field": field, "value": value},
        )
    if value <= 0:
        raise InvalidConfigError(
            f"{field} must be greater than 0",
            {"field": field, "value": value},
        )


def _split_host_port(target: str) -> tuple[str, str]:
    """Split ``host:port`` / ``[v6host]:port`` into its two halves."""
    if target.startswith("["):
        end = target.find("]")
        if end < 0:
            raise InvalidConfigError(
                "invalid target format: missing ']' in address",
                {"field": "target", "value": target},
            )
        rest = target[end + 1 :]
        if not rest.startswith(":"):
            raise InvalidConfigError(
                "invalid target format: missing port in address",
                {"field": "target", "value": target},
            )
        return target[1:end], rest[1:]

    host, sep, port = target.rpartition(":")
    if not sep:
        raise InvalidConfigError(
            "invalid target format: missing port in address",
            {"field": "target", "value": target},
        )
    if ":" in host:
        raise InvalidConfigError(
            "invalid target format: too many colons in address",
            {"field": "target", "value": target},
        )
    if "[" in host or "]" in host:
        raise InvalidConfigError(
            "invalid target format: unexpected bracket in address",
            {"field": "target", "value": target},
        )
    return host, port


def parse_target(target: str) -> Target:
    """Parse and range-check a ``host:port`` string."""
    if not isinstance(target, str) or not target:
        raise InvalidConfigError(
            "target cannot be empty",
            {"field": "target", "value": target},
        )

    host, port = _split_host_port(target)

    if not host:
        raise InvalidConfigError(
            "target host cannot be empty",
            {"field": "target", "value": target},
        )

    if not _PORT_RE.fullmatch(port):
        raise InvalidConfigError(
            "invalid port number",
            {"field": "target", "value": target, "port": port},
        )

    port_num = int(port)
    if port_num < _MIN_PORT or port_num > _MAX_PORT:
        raise InvalidConfigError(
            f"port must be between {_MIN_PORT} and {_MAX_PORT}",
            {"field": "target", "value": target, "port": port_num},
        )

    return Target(host=host, port=port_num)


def validate_crypto(config: CryptoConfig) -> None:
    _require_positive_int("data_size", config.data_size)
    _require_positive_int("workers", config.workers)


def validate_udp(config: UDPConfig) -> None:
    parse_target(config.target)

    rate = config.rate
    if isinstance(rate, bool) or not isinstance(rate, (int, float)):
        raise InvalidConfigError(
            "rate must be a number",
            {"field": "rate", "value": rate},
        )
    if math.isnan(rate) or math.isinf(rate):
        raise InvalidConfigError(
            "rate must be finite",
            {"field": "rate", "value": rate},
        )
    if rate < 0:
        raise InvalidConfigError(
            "rate cannot be negative",
            {"field": "rate", "value": rate},
        )

    _require_positive_int("workers", config.workers)
