"""Phase-aligned pacing between probes."""

import time
from typing import Callable, Optional

import structlog

from httpstime.timing.clock import millis_within_second, now_ms
from httpstime.timing.estimator import normalize_ms


class PollScheduler:
    """Sleeps so the next probe is sent near the predicted server second boundary.

    ``dt`` is the millisecond-within-second at which the estimator predicts
    the server's second rolls over, as seen on the local clock. Pacing is
    advisory: a misaligned probe still yields a valid, if looser, bound.
    """

    def __init__(
        self,
        clock: Callable[[], int] = now_ms,
        sleep: Optional[Callable[[float], None]] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ):
        self.clock = clock
        self.sleep = sleep or time.sleep
        self.logger = logger or structlog.get_logger(__name__)

    @staticmethod
    def next_delay(dt: int, now: int) -> int:
        """Milliseconds to wait from ``now`` until the local phase ``dt``, in [0, 1000]."""
        return normalize_ms(dt - millis_within_second(now), inclusive_upper=True)

    def wait(self, dt: int) -> int:
        delay = self.next_delay(dt, self.clock())
        self.logger.debug(f"b: {delay}")
        self.sleep(delay / 1000.0)
        return delay
