"""
Small shared utilities.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Generator

NANOS_PER_MILLI = 1_000_000


def millis_to_nanos(ms: int | float) -> int:
    """Convert a millisecond epoch timestamp to the store's nanosecond epoch."""
    return int(ms) * NANOS_PER_MILLI


@contextmanager
def stopwatch() -> Generator[dict, None, None]:
    """Yield a dict that receives ``elapsed_ms`` when the block exits."""
    result: dict = {}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["elapsed_ms"] = int((time.perf_counter() - start) * 1000)
