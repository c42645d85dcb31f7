"""Wiring between the process environment and a run's stop token.

The engine only ever sees a token; these helpers are what raise it.
"""

from __future__ import annotations

import signal
import threading

from loadgen.logger import Logger, session_logger


class SignalHandlers:
    """Raise *stop_event* on SIGINT/SIGTERM while the context is active.

    Previous handlers are restored on exit. The handler only sets the event
    and records the signal; callers log ``received`` once the run is over.
    """

    def __init__(
        self,
        stop_event: threading.Event,
        *,
        signals: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM),
        logger: Logger | None = None,
    ) -> None:
        self._stop_event = stop_event
        self._signals = signals
        self._logger = logger or session_logger
        self._previous: dict[int, object] = {}
        self.received: int | None = None

    def _handle(self, signum: int, _frame) -> None:
        self.received = signum
        self._stop_event.set()

    def __enter__(self) -> "SignalHandlers":
        for signum in self._signals:
            try:
                self._previous[signum] = signal.signal(signum, self._handle)
            except (ValueError, OSError) as exc:
                # Only the main thread may install handlers.
                self._logger.debug(
                    "loadgen.signal_handler_unavailable",
                    event="loadgen.signal_handler_unavailable",
                    signum=signum,
                    error=str(exc),
                )
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        for signum, previous in self._previous.items():
            if previous is None:
                # Installed outside Python; there is nothing we can reinstate.
                continue
            signal.signal(signum, previous)  # type: ignore[arg-type]
        self._previous.clear()
        return False


def stop_after(stop_event: threading.Event, duration_seconds: float) -> threading.Timer:
    """Arm a daemon timer that raises *stop_event* after *duration_seconds*."""
    timer = threading.Timer(max(0.0, duration_seconds), stop_event.set)
    timer.daemon = True
    timer.start()
    return timer


def signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)
