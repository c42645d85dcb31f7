"""Worker bodies for the two workload modes.

Each function here runs on its own worker thread or process until the run's stop token
is raised. Hot loops never log and never allocate beyond what the workload
itself needs.
"""

from __future__ import annotations

import hashlib
import socket
import time

from loadgen.core.models import StopToken, Target
from loadgen.exceptions import WorkerSetupError
from loadgen.logger import Logger, session_logger

NOISE_PAYLOAD = b"noise"

# Bounds how long a single send may block on a full socket buffer, so a
# worker still sees the stop token promptly.
_SEND_TIMEOUT_SECONDS = 0.25


def make_hash_buffer(data_size: int) -> bytes:
    """Build the read-only buffer hashed by every crypto worker of a run."""
    return bytes(data_size)


def hash_worker(buffer: bytes, stop_event: StopToken) -> None:
    sha256 = hashlib.sha256
    while not stop_event.is_set():
        sha256(buffer).digest()


def open_udp_socket(target: Target) -> socket.socket:
    """Resolve *target* and return a datagram socket connected to it."""
    try:
        infos = socket.getaddrinfo(target.host, target.port, type=socket.SOCK_DGRAM)
    except (OSError, UnicodeError) as exc:
        raise WorkerSetupError(
            f"cannot resolve {target}",
            {"target": str(target), "error_type": type(exc).__name__},
        ) from exc

    last_exc: OSError | None = None
    for family, socktype, proto, _canonname, sockaddr in infos:
        sock: socket.socket | None = None
        try:
            sock = socket.socket(family, socktype, proto)
            sock.settimeout(_SEND_TIMEOUT_SECONDS)
            sock.connect(sockaddr)
            return sock
        except OSError as exc:
            last_exc = exc
            if sock is not None:
                sock.close()

    raise WorkerSetupError(
        f"cannot open UDP socket to {target}",
        {
            "target": str(target),
            "error_type": type(last_exc).__name__ if last_exc else None,
        },
    ) from last_exc


def packet_worker(
    worker_id: int,
    target: Target,
    interval: float | None,
    stop_event: StopToken,
    *,
    logger: Logger | None = None,
) -> None:
    """Send ``NOISE_PAYLOAD`` to *target* until *stop_event* is raised.

    ``interval is None`` sends back-to-back; otherwise one datagram per
    *interval* seconds. A worker that cannot open its socket logs and exits;
    the rest of the pool keeps running.
    """
    log = logger or session_logger

    try:
        sock = open_udp_socket(target)
    except WorkerSetupError as exc:
        log.warning(
            "loadgen.worker_setup_failed",
            event="loadgen.worker_setup_failed",
            worker_id=worker_id,
            target=str(target),
            code=exc.code,
            error=str(exc.__cause__ or exc.message),
        )
        return

    with sock:
        if interval is None:
            _send_unlimited(sock, stop_event)
        else:
            _send_paced(sock, interval, stop_event)


def _send_unlimited(sock: socket.socket, stop_event: StopToken) -> None:
    send = sock.send
    while not stop_event.is_set():
        try:
            send(NOISE_PAYLOAD)
        except OSError:
            # Nobody listening, or the buffer is full: keep flooding.
            continue


def _send_paced(sock: socket.socket, interval: float, stop_event: StopToken) -> None:
    next_fire = time.monotonic() + interval
    while True:
        delay = next_fire - time.monotonic()
        if delay > 0:
            if stop_event.wait(delay):
                return
        elif stop_event.is_set():
            return

        try:
            sock.send(NOISE_PAYLOAD)
        except OSError:
            pass

        # Missed ticks are dropped rather than replayed in a burst.
        next_fire = max(next_fire + interval, time.monotonic())
