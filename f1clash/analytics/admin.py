"""Admin statistics endpoints: range parsing, auth guard and payload assembly."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any
from urllib.parse import parse_qsl

from f1clash.analytics.domain import (
    AnalyticsError,
    AnalyticsQuery,
    CountryCount,
    DailyCount,
    DayCount,
    DeviceCount,
    EngagementStats,
    FeatureCount,
    FunnelStats,
    HourCount,
    PathCount,
    ReferrerCount,
    Summary,
)
from f1clash.auth import AuthStatus
from f1clash.error import BadRequest

__all__ = [
    "DashboardPayload",
    "RangeParams",
    "TimePayload",
    "Unauthorized",
    "dashboard",
    "error_response",
    "guard",
    "stats_endpoint",
    "time_patterns",
]

log = logging.getLogger(__name__)

_U32_MAX = 2**32 - 1


def _parse_u32(key: str, raw: str) -> int:
    digits = raw[1:] if raw.startswith("+") else raw
    if not digits or not (digits.isascii() and digits.isdigit()):
        raise BadRequest(f"invalid value for `{key}`: {raw!r}")
    value = int(digits)
    if value > _U32_MAX:
        raise BadRequest(f"value for `{key}` is too large: {raw!r}")
    return value


@dataclass(frozen=True)
class RangeParams:
    """Time window in days and row limit for the statistics queries."""

    days: int = 30
    limit: int = 10

    @classmethod
    def from_query(cls, query: Mapping[str, str] | str) -> RangeParams:
        """Parse from a query string or mapping; unknown keys are ignored."""
        pairs = (
            parse_qsl(query, keep_blank_values=True)
            if isinstance(query, str)
            else list(query.items())
        )
        values: dict[str, int] = {}
        for key, raw in pairs:
            if key not in ("days", "limit"):
                continue
            if key in values:
                raise BadRequest(f"duplicate field `{key}`")
            values[key] = _parse_u32(key, raw)
        return cls(**values)


@dataclass(frozen=True)
class TimePayload:
    hourly: list[HourCount]
    dow: list[DayCount]


@dataclass(frozen=True)
class DashboardPayload:
    summary: Summary
    visits_per_day: list[DailyCount]
    top_paths: list[PathCount]
    top_referrers: list[ReferrerCount]
    top_countries: list[CountryCount]
    device_breakdown: list[DeviceCount]
    feature_counts: list[FeatureCount]
    engagement: EngagementStats
    hourly: list[HourCount]
    dow: list[DayCount]
    funnel: FunnelStats
    days: int


class Unauthorized(Exception):
    """The admin statistics need a logged-in session."""

    def __init__(self) -> None:
        super().__init__("unauthorized")


def guard(auth: AuthStatus) -> None:
    """Raise Unauthorized when auth is enabled and the request is not logged in."""
    if auth.enabled and not auth.logged_in:
        raise Unauthorized()


async def time_patterns(
    analytics: AnalyticsQuery, auth: AuthStatus, params: RangeParams
) -> TimePayload:
    guard(auth)
    hourly, dow = await asyncio.gather(
        analytics.hourly_distribution(params.days),
        analytics.day_of_week_distribution(params.days),
    )
    return TimePayload(hourly=hourly, dow=dow)


async def dashboard(
    analytics: AnalyticsQuery, auth: AuthStatus, params: RangeParams
) -> DashboardPayload:
    guard(auth)
    days, limit = params.days, params.limit
    (
        summary,
        visits,
        paths,
        referrers,
        countries,
        devices,
        features,
        engagement,
        hourly,
        dow,
        funnel,
    ) = await asyncio.gather(
        analytics.summary(days),
        analytics.visits_per_day(days),
        analytics.top_paths(days, limit),
        analytics.top_referrers(days, limit),
        analytics.top_countries(days, limit),
        analytics.device_breakdown(days),
        analytics.feature_counts(days),
        analytics.engagement(days),
        analytics.hourly_distribution(days),
        analytics.day_of_week_distribution(days),
        analytics.funnel(days),
    )
    return DashboardPayload(
        summary=summary,
        visits_per_day=visits,
        top_paths=paths,
        top_referrers=referrers,
        top_countries=countries,
        device_breakdown=devices,
        feature_counts=features,
        engagement=engagement,
        hourly=hourly,
        dow=dow,
        funnel=funnel,
        days=days,
    )


_Query = Callable[[AnalyticsQuery, RangeParams], Awaitable[Any]]

_SIMPLE_ENDPOINTS: dict[str, _Query] = {
    "summary": lambda a, p: a.summary(p.days),
    "visits": lambda a, p: a.visits_per_day(p.days),
    "paths": lambda a, p: a.top_paths(p.days, p.limit),
    "referrers": lambda a, p: a.top_referrers(p.days, p.limit),
    "countries": lambda a, p: a.top_countries(p.days, p.limit),
    "devices": lambda a, p: a.device_breakdown(p.days),
    "engagement": lambda a, p: a.engagement(p.days),
    "features": lambda a, p: a.feature_counts(p.days),
    "funnel": lambda a, p: a.funnel(p.days),
}


async def stats_endpoint(
    analytics: AnalyticsQuery, auth: AuthStatus, name: str, params: RangeParams
) -> Any:
    """Answer the named statistics endpoint (e.g. "summary", "paths", "dashboard")."""
    if name == "time":
        return await time_patterns(analytics, auth, params)
    if name == "dashboard":
        return await dashboard(analytics, auth, params)
    query = _SIMPLE_ENDPOINTS.get(name)
    if query is None:
        raise LookupError(f"unknown stats endpoint: {name!r}")
    guard(auth)
    return await query(analytics, params)


def error_response(error: Exception) -> tuple[HTTPStatus, dict[str, str]]:
    """HTTP status and JSON body for an endpoint failure."""
    if isinstance(error, Unauthorized):
        return HTTPStatus.UNAUTHORIZED, {"error": "unauthorized"}
    if isinstance(error, AnalyticsError):
        log.error("analytics query failed: %s", error)
        return HTTPStatus.INTERNAL_SERVER_ERROR, {"error": str(error)}
    raise TypeError(f"not an analytics endpoint error: {error!r}")