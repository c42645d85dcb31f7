"""Worker-pool engine: config validation, rate division, workloads and launcher."""

from __future__ import annotations

from loadgen.core.engine import WorkerPool, run_crypto_load, run_udp_noise
from loadgen.core.models import CryptoConfig, Mode, StopToken, Target, UDPConfig
from loadgen.core.rate import per_worker_interval
from loadgen.core.validation import parse_target, validate_crypto, validate_udp

__all__ = [
    "CryptoConfig",
    "Mode",
    "StopToken",
    "Target",
    "UDPConfig",
    "WorkerPool",
    "parse_target",
    "per_worker_interval",
    "run_crypto_load",
    "run_udp_noise",
    "validate_crypto",
    "validate_udp",
]
