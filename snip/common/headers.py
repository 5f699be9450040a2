"""Request header helpers: the public origin for short URLs and click metadata."""

from typing import Dict, Mapping, NamedTuple, Optional


class Forwarded(NamedTuple):
    """X-Forwarded-* values set by a reverse proxy."""

    proto: Optional[str]
    host: Optional[str]
    client: Optional[str]


def _lowered(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k.lower(): v for k, v in headers.items()}


def parse_forwarded(headers: Mapping[str, str]) -> Forwarded:
    """Read the proxy headers, case-insensitively."""
    lowered = _lowered(headers)
    return Forwarded(
        proto=lowered.get("x-forwarded-proto"),
        host=lowered.get("x-forwarded-host"),
        client=lowered.get("x-forwarded-for"),
    )


def public_origin(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Origin that short URLs handed to this caller are built on.

    The proxy's X-Forwarded-Proto/Host pair wins, then the request's own
    scheme and Host, then the configured base URL.

    Args:
        headers: Request headers
        fallback_base_url: Configured base URL
        request_scheme: Scheme the request arrived on
        request_host: Host header of the request

    Returns:
        Origin without a trailing slash (e.g., https://sn.ip)
    """
    forwarded = parse_forwarded(headers)
    if forwarded.proto and forwarded.host:
        origin = f"{forwarded.proto}://{forwarded.host}"
    elif request_scheme and request_host:
        origin = f"{request_scheme}://{request_host}"
    else:
        origin = fallback_base_url
    return origin.rstrip("/")


def client_ip(headers: Mapping[str, str], peer_host: Optional[str] = None) -> str:
    """Visitor address for a click.

    The first entry of X-Forwarded-For wins over the socket peer.
    """
    chain = parse_forwarded(headers).client
    if chain:
        first = chain.split(",")[0].strip()
        if first:
            return first
    return peer_host or "unknown"


def build_click_meta(headers: Mapping[str, str], peer_host: Optional[str] = None) -> Dict[str, Optional[str]]:
    """Collect ip, user agent and referer for a redirect request."""
    lowered = _lowered(headers)
    return {
        "ip": client_ip(headers, peer_host),
        "user_agent": lowered.get("user-agent") or "unknown",
        "referer": lowered.get("referer") or None,
    }
