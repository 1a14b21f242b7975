"""Timing and size helpers used when assembling run metrics."""
from __future__ import annotations

import math
import time


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


def elapsed_ms(start_ms: float) -> int:
    """Whole milliseconds elapsed since a `monotonic_ms()` reading."""
    return int(round(monotonic_ms() - start_ms))


def byte_size(content: str) -> int:
    return len(content.encode("utf-8"))


def size_kb(size_bytes: int) -> int:
    """Kilobytes rounded half up (0.5 KB -> 1)."""
    return int(math.floor(size_bytes / 1024 + 0.5))


__all__ = ["monotonic_ms", "elapsed_ms", "byte_size", "size_kb"]
