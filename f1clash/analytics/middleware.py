"""Recording of page events for incoming requests."""

from __future__ import annotations

import logging
import string
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from ipaddress import IPv4Address, IPv6Address, ip_address
from urllib.parse import urlsplit

from f1clash.analytics.domain import AnalyticsError, AnalyticsSink, Device, PageEvent
from f1clash.analytics.geoip import GeoIpProvider

__all__ = [
    "AnalyticsState",
    "canonicalize_path",
    "client_ip",
    "extract_referrer_host",
    "is_static_segment",
    "record_page_event",
    "should_skip",
]

log = logging.getLogger(__name__)

_U32_MAX = 2**32 - 1
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)

_STATIC_SEGMENTS = frozenset(
    {
        "inventory", "setups", "drivers", "boosts", "optimizer", "presets",
        "compare", "seasons", "advisor", "summary", "visits", "devices",
        "dashboard", "referrers", "countries", "engagement", "features",
        "funnel", "selector", "static", "export", "import", "season",
        "share", "admin",
    }
)


@dataclass(frozen=True)
class AnalyticsState:
    """What page-event recording needs: a sink and a GeoIP provider."""

    sink: AnalyticsSink
    geoip: GeoIpProvider


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            if all(ch == "\t" or " " <= ch <= "~" for ch in value):
                return value
            return None
    return None


def should_skip(path: str) -> bool:
    """Whether a request path is excluded from analytics."""
    return (
        path.startswith("/admin")
        or path.startswith("/auth")
        or path == "/favicon.ico"
        or path.startswith("/static/")
    )


def extract_referrer_host(raw: str | None) -> str | None:
    """Host part of a Referer, so paths and queries of other sites are not kept."""
    if raw is None:
        return None
    try:
        parts = urlsplit(raw)
        host = parts.hostname
    except ValueError:
        return None
    if not parts.scheme:
        return None
    return host or None


def is_static_segment(segment: str) -> bool:
    """Known path components that are never treated as hashes."""
    return segment in _STATIC_SEGMENTS


def _canonical_segment(segment: str) -> str:
    if segment and segment.isascii() and segment.isdigit():
        return ":id"
    if (
        len(segment) >= 6
        and segment.isascii()
        and segment.isalnum()
        and not is_static_segment(segment)
    ):
        return ":hash"
    return segment


def canonicalize_path(path: str) -> str:
    """Replace numeric IDs with ':id' and hash-like segments with ':hash'."""
    return "/".join(_canonical_segment(seg) for seg in path.split("/"))


def _parse_ip(raw: str | None) -> IPv4Address | IPv6Address | None:
    if raw is None:
        return None
    try:
        return ip_address(raw)
    except ValueError:
        return None


def client_ip(
    headers: Mapping[str, str], addr: tuple[str, int] | None
) -> IPv4Address | IPv6Address | None:
    """Client IP, preferring proxy headers over the peer address."""
    cf_ip = _parse_ip(_header(headers, "cf-connecting-ip"))
    if cf_ip is not None:
        return cf_ip
    forwarded = _header(headers, "x-forwarded-for")
    if forwarded is not None:
        first = _parse_ip(forwarded.split(",")[0].strip())
        if first is not None:
            return first
    return _parse_ip(addr[0]) if addr is not None else None


async def record_page_event(
    state: AnalyticsState,
    path: str,
    method: str,
    headers: Mapping[str, str],
    status: int,
    response_ms: int,
    addr: tuple[str, int] | None = None,
    session_id: str | None = None,
) -> PageEvent | None:
    """Build and store the page event for a finished request.

    Returns None for skipped paths. Sink failures are logged, not raised;
    callers schedule this as a background task so it never delays a response.
    """
    if should_skip(path):
        return None

    cf_country = _header(headers, "cf-ipcountry")
    if cf_country is not None:
        cf_country = cf_country.translate(_ASCII_UPPER)
        if len(cf_country.encode()) != 2 or cf_country == "XX":
            cf_country = None

    if cf_country is not None:
        country = cf_country
    else:
        ip = client_ip(headers, addr)
        country = await state.geoip.lookup(ip) if ip is not None else None

    event = PageEvent(
        path=path,
        canonical_path=canonicalize_path(path),
        kind="page" if method == "GET" else "action",
        method=method,
        status=status,
        referrer=extract_referrer_host(_header(headers, "referer")),
        device=Device.from_user_agent(_header(headers, "user-agent")),
        country=country,
        response_ms=max(0, min(int(response_ms), _U32_MAX)),
        ts=datetime.now(timezone.utc),
        session_id=session_id,
    )
    try:
        await state.sink.record(event)
    except AnalyticsError as exc:
        log.warning("failed to record page event: %s", exc)
    return event


def elapsed_ms(started: float) -> int:
    """Milliseconds since a time.monotonic() reading."""
    return int((time.monotonic() - started) * 1000)