"""
Offset estimation from second-truncated HTTP Date samples.

Each probe brackets the server's reported second between a local send and
receive instant. Because the Date header is truncated to the start of the
server's second, the true server instant lies somewhere in
[reported, reported + 1s), which yields a conservative interval for
(local clock - server clock). Successive samples are intersected so the
interval only ever shrinks.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from httpstime.timing.clock import ONE_SECOND_MS

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def normalize_ms(value: int, inclusive_upper: bool = False) -> int:
    """Fold a millisecond value into one second.

    Returns a value in [0, 1000), or in [0, 1000] when ``inclusive_upper``
    is set. Values already in range are returned unchanged.
    """
    if inclusive_upper:
        if value > ONE_SECOND_MS:
            return (value - 1) % ONE_SECOND_MS + 1
        return value % ONE_SECOND_MS if value < 0 else value
    return value % ONE_SECOND_MS


@dataclass(frozen=True)
class ProbeSample:
    """One timestamped round trip. All instants are epoch milliseconds."""
    send: int
    receive: int
    server_reported: int

    def __post_init__(self):
        if self.receive < self.send:
            raise ValueError(
                f"receive ({self.receive}) precedes send ({self.send}); local clock stepped backwards"
            )

    @property
    def round_trip(self) -> int:
        return self.receive - self.send


@dataclass(frozen=True)
class OffsetBounds:
    """Feasible interval for (local - server), in milliseconds."""
    low: int = INT64_MIN
    high: int = INT64_MAX

    @property
    def width(self) -> int:
        return self.high - self.low


class NarrowingDecision(Enum):
    RAISED_LOW = "B"
    LOWERED_HIGH = "A"
    UNCHANGED = "C"
    DISCARDED = "X"


@dataclass(frozen=True)
class EstimateUpdate:
    bounds: OffsetBounds
    dt: int
    decision: NarrowingDecision
    round_trip: int


class OffsetEstimator:
    """Maintains and narrows the offset bounds across samples."""

    def __init__(self, logger: Optional[structlog.BoundLogger] = None):
        self._bounds = OffsetBounds()
        self._accepted = 0
        self.logger = logger or structlog.get_logger(__name__)

    @property
    def bounds(self) -> OffsetBounds:
        return self._bounds

    @property
    def sample_count(self) -> int:
        """Number of samples that were not discarded."""
        return self._accepted

    @property
    def has_samples(self) -> bool:
        return self._accepted > 0

    @staticmethod
    def candidates(sample: ProbeSample):
        """Return (lower, upper) offset candidates for a single sample."""
        lower = (sample.send - ONE_SECOND_MS) - sample.server_reported
        upper = sample.receive - sample.server_reported
        return lower, upper

    def _narrow(self, lower: int, upper: int):
        low, high = self._bounds.low, self._bounds.high
        if lower > low:
            return NarrowingDecision.RAISED_LOW, lower, min(high, upper)
        if upper < high:
            return NarrowingDecision.LOWERED_HIGH, low, upper
        return NarrowingDecision.UNCHANGED, low, high

    def update(self, sample: ProbeSample) -> EstimateUpdate:
        """Fold one sample into the bounds and return the phase estimate."""
        lower, upper = self.candidates(sample)
        round_trip = sample.round_trip

        decision, low, high = self._narrow(lower, upper)
        if low > high:
            self.logger.warning(
                "Discarding sample that would cross bounds",
                lower=lower,
                upper=upper,
                low=self._bounds.low,
                high=self._bounds.high,
            )
            decision = NarrowingDecision.DISCARDED
        else:
            self._bounds = OffsetBounds(low=low, high=high)
            self._accepted += 1

        self.logger.debug(f"{decision.value} {self._bounds.low} {self._bounds.high}",
                          decision=decision.name)

        dt = self.phase_estimate(round_trip)
        self.logger.debug(f"dt: {dt}")
        return EstimateUpdate(bounds=self._bounds, dt=dt, decision=decision, round_trip=round_trip)

    def phase_estimate(self, round_trip: int) -> int:
        """Midpoint of the bounds, corrected by half the round trip, in [0, 1000)."""
        midpoint = (self._bounds.low + self._bounds.high) // 2
        return normalize_ms(midpoint - round_trip // 2)
