"""
HTTPS probe client.

Issues HEAD requests to a well-known path over a verified TLS connection and
turns each response into a ProbeSample: local send and receive instants plus
the server time parsed from the Date header.
"""

from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional

import requests
import structlog

from httpstime.config.settings import DEFAULT_USER_AGENT, WELL_KNOWN_PATH
from httpstime.errors import (
    ClockStepError,
    InvalidDateHeader,
    MissingDateHeader,
    ProbeNetworkError,
    ProbeTimeout,
    VerificationError,
)
from httpstime.timing.clock import now_ms
from httpstime.timing.estimator import ProbeSample


def build_probe_url(server: str, path: str = WELL_KNOWN_PATH) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"https://{server}{path}"


def parse_http_date(value: str) -> int:
    """Parse an HTTP-date header value into epoch milliseconds."""
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError) as e:
        raise InvalidDateHeader(f"Unparseable Date header: {value!r}") from e
    if parsed is None:
        raise InvalidDateHeader(f"Unparseable Date header: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp()) * 1000


class HttpsTimeProbe:
    """Times HEAD round trips against one server."""

    def __init__(
        self,
        server: str,
        path: str = WELL_KNOWN_PATH,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
        clock: Callable[[], int] = now_ms,
        logger: Optional[structlog.BoundLogger] = None,
    ):
        self.server = server
        self.url = build_probe_url(server, path)
        self.timeout = timeout
        self.clock = clock
        self.logger = logger or structlog.get_logger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def _head(self) -> requests.Response:
        return self.session.head(self.url, timeout=self.timeout, verify=True, allow_redirects=False)

    def verify(self) -> None:
        """Pre-flight request confirming the TLS connection is viable."""
        try:
            self._head()
        except requests.exceptions.RequestException as e:
            self.logger.debug(f"ssl verify FAIL! {e}")
            raise VerificationError(str(e)) from e
        self.logger.debug("ssl verify OK")

    def probe(self) -> ProbeSample:
        self.logger.debug(f"HEAD {self.url}")
        send = self.clock()
        try:
            response = self._head()
        except requests.exceptions.Timeout as e:
            raise ProbeTimeout(f"HEAD {self.url} timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise ProbeNetworkError(f"HEAD {self.url} failed: {e}") from e
        receive = self.clock()

        date = response.headers.get("Date")
        if not date:
            raise MissingDateHeader(f"No Date header in response from {self.server}")
        self.logger.debug(f"Date: {date}")

        server_reported = parse_http_date(date)
        self.logger.debug(f"t0: {send}")
        self.logger.debug(f"t1: {receive}")
        self.logger.debug(f"t2: {server_reported}")

        try:
            return ProbeSample(send=send, receive=receive, server_reported=server_reported)
        except ValueError as e:
            raise ClockStepError(str(e)) from e

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
