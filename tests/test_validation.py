"""Tests for server address validation"""

import pytest
from httpstime.utils.validation import split_server, validate_server


@pytest.mark.parametrize("server,expected", [
    ("example.com", ("example.com", None)),
    ("example.com:8443", ("example.com", 8443)),
    ("127.0.0.1:443", ("127.0.0.1", 443)),
    ("[::1]", ("::1", None)),
    ("[2001:db8::1]:8443", ("2001:db8::1", 8443)),
])
def test_split_server(server, expected):
    assert split_server(server) == expected


@pytest.mark.parametrize("server", [
    "",
    "   ",
    "https://example.com",
    "example.com/path",
    "example.com:",
    "example.com:0",
    "example.com:70000",
    "example.com:http",
    "exa mple.com",
    "[::1",
    "[::1]8443",
])
def test_invalid_servers(server):
    with pytest.raises(ValueError):
        validate_server(server)


def test_validate_strips_whitespace():
    assert validate_server("  example.com ") == "example.com"
