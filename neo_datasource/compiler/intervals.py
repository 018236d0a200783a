"""
Conversion of durations into the store's interval vocabulary.

The dialect expresses bucket widths as ``<magnitude> <unit>`` with the unit
drawn from msec, sec, min, hour and day (``ROLLUP 10 sec``,
``DATE_TRUNC('min', TIME, 5)``).  Conversions always round up so a bucket is
never narrower than the requested resolution.
"""
from __future__ import annotations

import re
from typing import NamedTuple

from neo_datasource.core.logging import get_logger

logger = get_logger(__name__)

MS_PER_SECOND = 1_000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

UNIT_WIDTH_MS: dict[str, int] = {
    "msec": 1,
    "sec": MS_PER_SECOND,
    "min": MS_PER_MINUTE,
    "hour": MS_PER_HOUR,
    "day": MS_PER_DAY,
}


class Interval(NamedTuple):
    magnitude: int
    unit: str

    def __str__(self) -> str:
        return f"{self.magnitude} {self.unit}"

    @property
    def width_ms(self) -> int | None:
        """Bucket width in milliseconds, None for an unmapped unit."""
        width = UNIT_WIDTH_MS.get(self.unit)
        return None if width is None else self.magnitude * width


def _ceil_div(n: int, d: int) -> int:
    return -(-n // d)


def duration_to_interval(ms: int) -> Interval:
    """Convert a millisecond duration to the smallest fitting ``Interval``."""
    ms = int(ms)
    if ms < MS_PER_SECOND:
        return Interval(ms, "msec")
    if ms < MS_PER_MINUTE:
        return Interval(_ceil_div(ms, MS_PER_SECOND), "sec")
    if ms < MS_PER_HOUR:
        return Interval(_ceil_div(ms, MS_PER_MINUTE), "min")
    if ms < MS_PER_DAY:
        return Interval(_ceil_div(ms, MS_PER_HOUR), "hour")
    return Interval(_ceil_div(ms, MS_PER_DAY), "day")


# ``ms`` must come before ``m`` in the alternation.
_INTERVAL_RE = re.compile(r"^\s*(\d+)\s*(ms|s|m|h|d|w|y)\s*$")

_LETTER_UNITS: dict[str, str] = {
    "ms": "msec",
    "s": "sec",
    "m": "min",
    "h": "hour",
    "d": "day",
}


def parse_interval_string(text: str | None) -> Interval | None:
    """Parse a compact token such as ``5m`` or ``500ms``.

    Returns None for empty or unparseable input.  Week and year letters are
    not part of the dialect: they come back with an empty unit, which
    callers must treat as unsupported.
    """
    if not text:
        return None

    m = _INTERVAL_RE.match(text)
    if not m:
        logger.warning("Unparseable interval string %r", text)
        return None

    number = int(m.group(1))
    letter = m.group(2)

    unit = _LETTER_UNITS.get(letter)
    if unit is None:
        logger.warning("Interval unit %r has no dialect equivalent -- leaving unmapped", letter)
        return Interval(number, "")

    if letter == "ms":
        return Interval(_ceil_div(number, MS_PER_SECOND), unit)
    return Interval(number, unit)
