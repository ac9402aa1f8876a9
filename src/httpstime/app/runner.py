"""Drives one httpstime run: pre-flight check, polling rounds, result."""

from typing import Optional

import structlog

from httpstime.api.probe import HttpsTimeProbe
from httpstime.app.reporter import ResultReporter, RunFailure, RunResult
from httpstime.errors import MissingDateHeader, ProbeError, RunAborted, VerificationError
from httpstime.timing.estimator import OffsetEstimator, ProbeSample
from httpstime.timing.scheduler import PollScheduler


class TimeProbeRun:
    """Sequential polling loop feeding the estimator and pacing via the scheduler."""

    def __init__(
        self,
        probe: HttpsTimeProbe,
        estimator: OffsetEstimator,
        scheduler: PollScheduler,
        reporter: ResultReporter,
        num_polls: int = 8,
        max_round_retries: int = 3,
        min_samples: int = 1,
        abort_on_missing_date: bool = False,
        logger: Optional[structlog.BoundLogger] = None,
    ):
        self.probe = probe
        self.estimator = estimator
        self.scheduler = scheduler
        self.reporter = reporter
        self.num_polls = num_polls
        self.max_round_retries = max_round_retries
        self.min_samples = min_samples
        self.abort_on_missing_date = abort_on_missing_date
        self.logger = logger or structlog.get_logger(__name__)
        self.rounds_completed = 0

    @property
    def server(self) -> str:
        return self.probe.server

    def run(self) -> RunResult:
        """Run every round and emit exactly one result line."""
        try:
            self.probe.verify()
        except VerificationError as e:
            return self._finish(RunFailure(self.server, f"Verify fail: {e}"))

        try:
            self._poll()
        except RunAborted as e:
            return self._finish(RunFailure(self.server, str(e)))

        accepted = self.estimator.sample_count
        if accepted < self.min_samples:
            return self._finish(RunFailure(
                self.server,
                f"Insufficient samples: {accepted} accepted, {self.min_samples} required",
            ))
        return self._finish(self.reporter.build(self.server, self.estimator))

    def _finish(self, result: RunResult) -> RunResult:
        self.reporter.emit(result)
        return result

    def _poll(self) -> None:
        dt = None
        for round_no in range(1, self.num_polls + 1):
            sample = self._poll_round(round_no)
            self.rounds_completed = round_no
            if sample is not None:
                dt = self.estimator.update(sample).dt
            if dt is not None and round_no < self.num_polls:
                self.scheduler.wait(dt)

    def _poll_round(self, round_no: int) -> Optional[ProbeSample]:
        """Probe with bounded retries; None if every attempt failed."""
        attempts = self.max_round_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return self.probe.probe()
            except MissingDateHeader as e:
                if self.abort_on_missing_date:
                    raise RunAborted(f"Round {round_no}: {e}") from e
                self.logger.warning("Probe failed", round=round_no, attempt=attempt, error=str(e))
            except ProbeError as e:
                self.logger.warning("Probe failed", round=round_no, attempt=attempt, error=str(e))

        self.logger.warning("Skipping round", round=round_no, attempts=attempts)
        return None
