from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Mode(str, Enum):
    """Workload mode.

    crypto: SHA-256 over a fixed buffer in a tight loop (CPU-bound)
    udp: fixed datagram sent to a target, optionally rate-limited (network-bound)
    """

    CRYPTO = "crypto"
    UDP = "udp"


class StopToken(Protocol):
    """Level-triggered cancellation signal shared by every worker of a run.

    ``threading.Event`` satisfies this protocol.
    """

    def is_set(self) -> bool: ...

    def wait(self, timeout: float | None = None) -> bool: ...


@dataclass(frozen=True)
class CryptoConfig:
    data_size: int = 1024
    workers: int = 1


@dataclass(frozen=True)
class UDPConfig:
    target: str = "127.0.0.1:1"
    rate: float = 0.0
    workers: int = 1

    @property
    def unlimited(self) -> bool:
        return self.rate == 0


@dataclass(frozen=True)
class Target:
    host: str
    port: int

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"
