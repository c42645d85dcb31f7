from __future__ import annotations

import re


_SEGMENT_RE = re.compile(r"(?P<value>\d+(?:\.\d+)?)(?P<unit>ms|s|m|h)")
_BARE_SECONDS_RE = re.compile(r"^\d+(?:\.\d+)?$")

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration_to_seconds(raw: str) -> float:
    """Parse run durations like '500ms', '10s', '5m', '1h30m' or '45' into seconds.

    A bare number is taken as seconds. Segments may be chained, each with its
    own unit, and are summed.
    """
    text = raw.strip()
    if not text:
        raise ValueError("duration must not be empty")

    if _BARE_SECONDS_RE.match(text):
        return float(text)

    total = 0.0
    pos = 0
    for match in _SEGMENT_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group("value")) * _UNIT_SECONDS[match.group("unit")]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError("duration must match <number><unit>[<number><unit>...] where unit is ms|s|m|h")

    return total
