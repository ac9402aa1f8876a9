"""Result lines for a finished run."""

import sys
from dataclasses import dataclass
from typing import Optional, TextIO, Union

import structlog

from httpstime.timing.estimator import OffsetEstimator


@dataclass(frozen=True)
class ConfidenceWindow:
    """Final offset interval in seconds."""
    server: str
    low: float
    high: float
    width: float

    status = 0

    def line(self) -> str:
        return f"*RESULT 0 {self.server} {self.low:.3f} {self.high:.3f} {self.width:.3f}"


@dataclass(frozen=True)
class RunFailure:
    server: str
    message: str

    status = 1

    def line(self) -> str:
        return f"*RESULT 1 {self.server} nan nan nan {self.message}"


RunResult = Union[ConfidenceWindow, RunFailure]


class ResultReporter:
    """Builds the RunResult from final bounds and writes its single line."""

    def __init__(self, stream: Optional[TextIO] = None, logger: Optional[structlog.BoundLogger] = None):
        self.stream = stream
        self.logger = logger or structlog.get_logger(__name__)

    @staticmethod
    def build(server: str, estimator: OffsetEstimator) -> RunResult:
        if not estimator.has_samples:
            return RunFailure(server, "No samples accepted")
        bounds = estimator.bounds
        low = bounds.low / 1000.0
        high = bounds.high / 1000.0
        return ConfidenceWindow(server=server, low=low, high=high, width=high - low)

    def emit(self, result: RunResult) -> str:
        line = result.line()
        stream = self.stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()
        self.logger.debug("Result emitted", status=result.status)
        return line
