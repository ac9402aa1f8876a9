"""
Server address validation.

Accepts ``HOST`` or ``HOST:PORT`` (including bracketed IPv6 literals such
as ``[::1]:8443``) and rejects anything that would change the probe URL's
scheme or path.
"""

import re
from typing import Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)

_HOST_RE = re.compile(r"^[A-Za-z0-9.\-_]+$")


def split_server(server: str) -> Tuple[str, Optional[int]]:
    """
    Split a server address into host and optional port.

    Raises:
        ValueError: if the address is empty, malformed, or carries an invalid port
    """
    server = server.strip()
    if not server:
        raise ValueError("Server address is empty")
    if "://" in server or "/" in server or any(c.isspace() for c in server):
        raise ValueError(f"Server must be HOST or HOST:PORT, got {server!r}")

    port_text = None
    if server.startswith("["):
        host, sep, rest = server[1:].partition("]")
        if not sep or not host:
            raise ValueError(f"Malformed IPv6 address: {server!r}")
        if rest:
            if not rest.startswith(":"):
                raise ValueError(f"Malformed IPv6 address: {server!r}")
            port_text = rest[1:]
    else:
        host, sep, port_text = server.partition(":")
        if not sep:
            port_text = None
        if not host or not _HOST_RE.match(host):
            raise ValueError(f"Invalid host in {server!r}")

    port = None
    if port_text is not None:
        if not port_text.isdigit() or not 0 < int(port_text) <= 65535:
            raise ValueError(f"Invalid port in {server!r}")
        port = int(port_text)
    return host, port


def validate_server(server: str) -> str:
    """Return the normalized server address or raise ValueError."""
    try:
        split_server(server)
    except ValueError as e:
        logger.error("Server validation failed", server=server, error=str(e))
        raise
    return server.strip()
