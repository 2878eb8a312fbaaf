"""Client IP derivation for HTTP requests and WebSocket handshakes."""

from __future__ import annotations

from typing import Mapping, Optional

_IPV4_MAPPED_PREFIX = "::ffff:"


def client_ip(headers: Mapping[str, str], peer_host: Optional[str] = None) -> str:
    """Return the caller's IP.

    Prefers the first entry of ``X-Forwarded-For`` and falls back to the
    socket peer address. An IPv4-mapped IPv6 prefix (``::ffff:``) is stripped.
    """
    forwarded = headers.get("x-forwarded-for") or ""
    ip = forwarded.split(",")[0].strip()
    if not ip:
        ip = peer_host or ""
    if ip.lower().startswith(_IPV4_MAPPED_PREFIX):
        ip = ip[len(_IPV4_MAPPED_PREFIX):]
    return ip
