"""Pytest configuration and fixtures

Provides shared fixtures for all tests: a fresh stop token per test, a live
UDP listener on an ephemeral port, and a loguru sink that captures structured
log records.
"""

import socket
import sys
import threading
from pathlib import Path

import pytest
from loguru import logger as loguru_logger

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


class UDPListener:
    """Counts datagrams received on a loopback port."""

    def __init__(self) -> None:
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.settimeout(0.05)
        self.port = self._sock.getsockname()[1]
        self.payloads: list[bytes] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    @property
    def target(self) -> str:
        return f"127.0.0.1:{self.port}"

    @property
    def count(self) -> int:
        with self._lock:
            return len(self.payloads)

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                data, _addr = self._sock.recvfrom(2048)
            except (socket.timeout, OSError):
                continue
            with self._lock:
                self.payloads.append(data)

    def start(self) -> "UDPListener":
        self._thread.start()
        return self

    def close(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2)
        self._sock.close()


@pytest.fixture
def stop_event():
    """A fresh, unset stop token for one engine run."""
    return threading.Event()


@pytest.fixture
def cancel_after(stop_event):
    """Arm a timer that raises ``stop_event`` after the given seconds."""
    timers: list[threading.Timer] = []

    def _arm(seconds: float) -> threading.Timer:
        timer = threading.Timer(seconds, stop_event.set)
        timer.daemon = True
        timer.start()
        timers.append(timer)
        return timer

    yield _arm

    for timer in timers:
        timer.cancel()
    stop_event.set()


@pytest.fixture
def udp_listener():
    listener = UDPListener().start()
    yield listener
    listener.close()


@pytest.fixture
def log_records():
    """Capture loguru records (message + extra) emitted during the test."""
    records: list[dict] = []

    def _sink(message) -> None:
        record = message.record
        records.append(
            {
                "level": record["level"].name,
                "message": record["message"],
                "extra": dict(record["extra"]),
            }
        )

    sink_id = loguru_logger.add(_sink, level="DEBUG")
    yield records
    loguru_logger.remove(sink_id)
