"""Rate divider: spread a global packets/sec target evenly over workers.

Intervals shorter than the platform's timer resolution cannot be honoured;
such workers end up sending back-to-back at the scheduler's minimum
granularity. That is accepted, not an error.
"""

from __future__ import annotations


def per_worker_interval(rate: float, workers: int) -> float | None:
    """Return the send interval in seconds for one worker.

    ``rate == 0`` means unlimited and returns ``None`` (no interval, no
    division). Otherwise each worker sends at ``rate / workers`` packets/sec,
    i.e. once every ``workers / rate`` seconds.
    """
    if rate == 0:
        return None
    if rate < 0:
        raise ValueError("rate must be >= 0")
    if workers < 1:
        raise ValueError("workers must be >= 1")
    return workers / rate
