"""Local wall-clock helpers in integer milliseconds."""

import time

ONE_SECOND_MS = 1000


def now_ms() -> int:
    """Current local time as milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def millis_within_second(instant: int) -> int:
    return instant % ONE_SECOND_MS
