from __future__ import annotations

import multiprocessing
import signal
import threading
import time
from typing import Any, Callable

from loadgen.core.models import CryptoConfig, StopToken, UDPConfig
from loadgen.core.rate import per_worker_interval
from loadgen.core.validation import parse_target, validate_crypto, validate_udp
from loadgen.core.workloads import hash_worker, make_hash_buffer, packet_worker
from loadgen.exceptions import EngineError
from loadgen.logger import Logger, session_logger

WorkerFn = Callable[[int, StopToken], None]

# How often a worker blocked in a paced wait re-checks for a pool abort.
_ABORT_POLL_SECONDS = 0.05

# How often the process pool re-checks the caller's token while workers run.
_BRIDGE_POLL_SECONDS = 0.02

# Worker processes still alive this long after the stop was broadcast are
# terminated (e.g. a child still importing when the run is cancelled).
_JOIN_GRACE_SECONDS = 0.5


class _RunStop:
    """Stop token handed to workers: the caller's token, plus a pool-local abort.

    The pool never raises the caller's token itself; ``abort()`` only affects
    workers of this run.
    """

    def __init__(self, parent: StopToken) -> None:
        self._parent = parent
        self._aborted = threading.Event()

    def abort(self) -> None:
        self._aborted.set()

    def is_set(self) -> bool:
        return self._aborted.is_set() or self._parent.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        while not self.is_set():
            if deadline is None:
                step = _ABORT_POLL_SECONDS
            else:
                step = min(_ABORT_POLL_SECONDS, deadline - time.monotonic())
                if step <= 0:
                    return False
            if self._parent.wait(step):
                return True
        return True


class ProcessStop:
    """Stop token shared with worker processes.

    ``is_set`` reads a lock-free shared byte so the hash loop can poll it on
    every iteration without contending on a cross-process lock; ``wait``
    blocks on a ``multiprocessing`` event raised alongside it.
    """

    def __init__(self, context: Any = None) -> None:
        ctx = context or multiprocessing.get_context()
        self._flag = ctx.RawValue("b", 0)
        self._event = ctx.Event()

    def set(self) -> None:
        self._flag.value = 1
        self._event.set()

    def is_set(self) -> bool:
        return bool(self._flag.value)

    def wait(self, timeout: float | None = None) -> bool:
        if self._flag.value:
            return True
        return self._event.wait(timeout)


def _default_process_context():
    methods = multiprocessing.get_all_start_methods()
    if "forkserver" in methods:
        ctx = multiprocessing.get_context("forkserver")
        # Children fork from a server that already imported the workloads.
        ctx.set_forkserver_preload(["loadgen.core.workloads"])
        return ctx
    return multiprocessing.get_context("spawn")


def _process_entry(worker: Callable[..., None], worker_id: int, stop: ProcessStop, args: tuple) -> None:
    # Ctrl+C reaches the whole process group; only the parent reacts to it.
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        worker(*args, stop)
    except Exception as exc:
        session_logger.error(
            "loadgen.worker_crashed",
            event="loadgen.worker_crashed",
            worker_id=worker_id,
            error_type=type(exc).__name__,
            error=str(exc),
        )


class WorkerPool:
    """Fixed number of worker threads sharing one stop token.

    ``run`` starts exactly ``size`` threads and returns only after all of
    them have exited.
    """

    def __init__(self, name: str, size: int, *, logger: Logger | None = None) -> None:
        if size < 1:
            raise ValueError("size must be >= 1")
        self._name = name
        self._size = size
        self._logger = logger or session_logger

    def run(self, worker: WorkerFn, stop_event: StopToken) -> None:
        run_stop = _RunStop(stop_event)
        threads: list[threading.Thread] = []

        try:
            for worker_id in range(self._size):
                thread = threading.Thread(
                    target=self._run_worker,
                    args=(worker, worker_id, run_stop),
                    name=f"{self._name}-{worker_id}",
                    daemon=True,
                )
                thread.start()
                threads.append(thread)
        except (RuntimeError, OSError) as exc:
            run_stop.abort()
            self._join(threads)
            raise _start_failed(self._logger, self._name, len(threads), self._size, exc) from exc

        self._logger.debug(
            "loadgen.pool_started",
            event="loadgen.pool_started",
            pool=self._name,
            workers=len(threads),
        )
        self._join(threads)

    @staticmethod
    def _join(threads: list[threading.Thread]) -> None:
        for thread in threads:
            thread.join()

    def _run_worker(self, worker: WorkerFn, worker_id: int, stop_event: StopToken) -> None:
        try:
            worker(worker_id, stop_event)
        except Exception as exc:
            # A crashed worker shrinks the pool; it never aborts the run.
            self._logger.error(
                "loadgen.worker_crashed",
                event="loadgen.worker_crashed",
                pool=self._name,
                worker_id=worker_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )


class ProcessWorkerPool:
    """Fixed number of worker processes for CPU-bound workloads.

    ``worker`` must be importable (it is pickled by reference) and is called
    in each child as ``worker(*args, stop)``. The caller's token stays in this
    process; the pool watches it and broadcasts to the children through a
    ``ProcessStop``. ``run`` returns only after every child has exited.
    """

    def __init__(
        self,
        name: str,
        size: int,
        *,
        logger: Logger | None = None,
        context: Any = None,
    ) -> None:
        if size < 1:
            raise ValueError("size must be >= 1")
        self._name = name
        self._size = size
        self._logger = logger or session_logger
        self._ctx = context or _default_process_context()

    def run(self, worker: Callable[..., None], args: tuple, stop_event: StopToken) -> None:
        stop = ProcessStop(self._ctx)
        if stop_event.is_set():
            stop.set()
        processes: list = []

        try:
            for worker_id in range(self._size):
                process = self._ctx.Process(
                    target=_process_entry,
                    args=(worker, worker_id, stop, args),
                    name=f"{self._name}-{worker_id}",
                    daemon=True,
                )
                process.start()
                processes.append(process)
        except (RuntimeError, OSError) as exc:
            stop.set()
            self._join(processes)
            raise _start_failed(self._logger, self._name, len(processes), self._size, exc) from exc

        self._logger.debug(
            "loadgen.pool_started",
            event="loadgen.pool_started",
            pool=self._name,
            workers=len(processes),
            start_method=self._ctx.get_start_method(),
        )

        while not stop_event.wait(_BRIDGE_POLL_SECONDS):
            if not any(p.is_alive() for p in processes):
                break
        stop.set()
        self._join(processes)

    def _join(self, processes: list) -> None:
        deadline = time.monotonic() + _JOIN_GRACE_SECONDS
        for process in processes:
            process.join(max(0.0, deadline - time.monotonic()))

        for process in processes:
            if process.is_alive():
                self._logger.warning(
                    "loadgen.worker_terminated",
                    event="loadgen.worker_terminated",
                    pool=self._name,
                    worker=process.name,
                    grace_seconds=_JOIN_GRACE_SECONDS,
                )
                process.terminate()
                process.join()


def _start_failed(logger: Logger, pool: str, started: int, requested: int, exc: BaseException) -> EngineError:
    logger.error(
        "loadgen.pool_start_failed",
        event="loadgen.pool_start_failed",
        pool=pool,
        started=started,
        requested=requested,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return EngineError(
        f"could not start worker {started} of {requested}",
        {"pool": pool, "started": started, "requested": requested},
    )


def run_crypto_load(
    config: CryptoConfig,
    stop_event: StopToken,
    *,
    logger: Logger | None = None,
) -> None:
    """Hash a shared buffer in ``config.workers`` processes until *stop_event* is set."""
    log = logger or session_logger
    validate_crypto(config)

    buffer = make_hash_buffer(config.data_size)

    log.info(
        "loadgen.start",
        event="loadgen.start",
        mode="crypto",
        data_size=config.data_size,
        workers=config.workers,
    )
    started = time.monotonic()

    ProcessWorkerPool("loadgen-crypto", config.workers, logger=log).run(
        hash_worker, (buffer,), stop_event
    )

    log.info(
        "loadgen.end",
        event="loadgen.end",
        mode="crypto",
        duration_seconds=round(time.monotonic() - started, 3),
    )


def run_udp_noise(
    config: UDPConfig,
    stop_event: StopToken,
    *,
    logger: Logger | None = None,
) -> None:
    """Flood ``config.target`` from ``config.workers`` threads until *stop_event* is set."""
    log = logger or session_logger
    validate_udp(config)

    target = parse_target(config.target)
    interval = per_worker_interval(config.rate, config.workers)

    def _worker(worker_id: int, stop: StopToken) -> None:
        packet_worker(worker_id, target, interval, stop, logger=log)

    log.info(
        "loadgen.start",
        event="loadgen.start",
        mode="udp",
        target=str(target),
        rate="unlimited" if config.unlimited else config.rate,
        workers=config.workers,
        interval_seconds=interval,
    )
    started = time.monotonic()

    WorkerPool("loadgen-udp", config.workers, logger=log).run(_worker, stop_event)

    log.info(
        "loadgen.end",
        event="loadgen.end",
        mode="udp",
        duration_seconds=round(time.monotonic() - started, 3),
    )
