"""Tests for the HTTPS probe client"""

from unittest.mock import MagicMock

import pytest
import requests
from httpstime.api.probe import HttpsTimeProbe, build_probe_url, parse_http_date
from httpstime.errors import (
    ClockStepError, InvalidDateHeader, MissingDateHeader, ProbeError,
    ProbeNetworkError, ProbeTimeout, VerificationError
)

# Tue, 14 Nov 2023 22:13:20 GMT
DATE_HEADER = "Tue, 14 Nov 2023 22:13:20 GMT"
DATE_MS = 1_700_000_000_000


def _clock(*instants):
    values = iter(instants)
    return lambda: next(values)


def _response(headers):
    response = MagicMock()
    response.headers = headers
    return response


def _probe(session, clock=None):
    return HttpsTimeProbe(
        "example.com",
        user_agent="httpstime-test/1.0",
        timeout=2.5,
        session=session,
        clock=clock or _clock(DATE_MS + 100, DATE_MS + 130),
    )


class TestHelpers:
    def test_build_probe_url(self):
        assert build_probe_url("example.com") == "https://example.com/.well-known/time"
        assert build_probe_url("example.com:8443", "status") == "https://example.com:8443/status"

    def test_parse_http_date(self):
        assert parse_http_date(DATE_HEADER) == DATE_MS

    def test_parse_obsolete_format(self):
        """Test RFC 850 style dates are accepted"""
        assert parse_http_date("Tuesday, 14-Nov-23 22:13:20 GMT") == DATE_MS

    @pytest.mark.parametrize("value", ["", "not a date", "Tue, 99 Foo 2023"])
    def test_parse_invalid(self, value):
        with pytest.raises(InvalidDateHeader):
            parse_http_date(value)


class TestVerify:
    def test_verify_ok(self):
        session = MagicMock()
        session.head.return_value = _response({"Date": DATE_HEADER})

        _probe(session).verify()

        session.head.assert_called_once_with(
            "https://example.com/.well-known/time", timeout=2.5, verify=True, allow_redirects=False
        )

    def test_verify_ssl_failure(self):
        session = MagicMock()
        session.head.side_effect = requests.exceptions.SSLError("certificate verify failed")

        with pytest.raises(VerificationError, match="certificate verify failed"):
            _probe(session).verify()

    def test_user_agent_header(self):
        session = MagicMock()
        session.headers = {}
        _probe(session)
        assert session.headers["User-Agent"] == "httpstime-test/1.0"


class TestProbe:
    def test_probe_sample(self):
        session = MagicMock()
        session.head.return_value = _response({"Date": DATE_HEADER})

        sample = _probe(session).probe()

        assert sample.send == DATE_MS + 100
        assert sample.receive == DATE_MS + 130
        assert sample.server_reported == DATE_MS
        assert sample.round_trip == 30

    def test_missing_date(self):
        session = MagicMock()
        session.head.return_value = _response({})

        with pytest.raises(MissingDateHeader):
            _probe(session).probe()

    def test_invalid_date_is_missing_date(self):
        session = MagicMock()
        session.head.return_value = _response({"Date": "yesterday"})

        with pytest.raises(MissingDateHeader):
            _probe(session).probe()

    def test_timeout(self):
        session = MagicMock()
        session.head.side_effect = requests.exceptions.ReadTimeout("slow")

        with pytest.raises(ProbeTimeout):
            _probe(session).probe()

    def test_connection_error(self):
        session = MagicMock()
        session.head.side_effect = requests.exceptions.ConnectionError("reset")

        with pytest.raises(ProbeNetworkError):
            _probe(session).probe()

    def test_backwards_clock_is_clock_step(self):
        session = MagicMock()
        session.head.return_value = _response({"Date": DATE_HEADER})

        with pytest.raises(ClockStepError) as exc:
            _probe(session, clock=_clock(DATE_MS + 100, DATE_MS + 50)).probe()
        assert isinstance(exc.value, ProbeError)
        assert not isinstance(exc.value, ProbeNetworkError)

    def test_context_manager_closes_session(self):
        session = MagicMock()
        with _probe(session):
            pass
        session.close.assert_called_once()
