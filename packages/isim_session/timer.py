"""
Question countdown arithmetic.

The authoritative elapsed time is always derived from the stored
``timer_start_time`` (epoch milliseconds). Periodic ticks only refresh the
display, so a suspended process never under-counts elapsed time.
"""
import time
from typing import Callable

Clock = Callable[[], int]

def now_ms() -> int:
    return int(time.time() * 1000)

def elapsed_seconds(start_ms: int, current_ms: int) -> int:
    return (current_ms - start_ms) // 1000

def remaining_seconds(time_limit: int, start_ms: int, current_ms: int) -> int:
    return time_limit - elapsed_seconds(start_ms, current_ms)

def is_expired(time_limit: int, start_ms: int, current_ms: int) -> bool:
    return remaining_seconds(time_limit, start_ms, current_ms) <= 0

def time_taken_seconds(time_limit: int, start_ms: int, current_ms: int) -> int:
    """Seconds spent on a question, clamped to [0, time_limit]."""
    return max(0, min(time_limit, elapsed_seconds(start_ms, current_ms)))
