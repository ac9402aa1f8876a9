"""Error taxonomy for httpstime runs."""


class HttpsTimeError(Exception):
    """Base class for all httpstime errors."""


class VerificationError(HttpsTimeError):
    """Pre-flight HEAD request failed (TLS handshake, certificate, transport)."""


class ProbeError(HttpsTimeError):
    """A single polling round failed; the round may be retried."""


class ProbeTimeout(ProbeError):
    pass


class ProbeNetworkError(ProbeError):
    pass


class ClockStepError(ProbeError):
    """Local clock stepped backwards during a round trip."""


class MissingDateHeader(ProbeError):
    """Response carried no usable Date header."""


class InvalidDateHeader(MissingDateHeader):
    """Date header present but not a valid HTTP-date."""


class RunAborted(HttpsTimeError):
    """Mid-run condition that ends the whole run."""
