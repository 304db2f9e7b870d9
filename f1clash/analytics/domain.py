"""Analytics events, the sink and query interfaces, and aggregate result types."""

from __future__ import annotations

import asyncio
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

__all__ = [
    "AnalyticsError",
    "AnalyticsQuery",
    "AnalyticsSink",
    "CountryCount",
    "DailyCount",
    "DayCount",
    "Device",
    "DeviceCount",
    "EngagementStats",
    "FeatureCount",
    "FeatureEvent",
    "FunnelStats",
    "HourCount",
    "PageEvent",
    "PathCount",
    "ReferrerCount",
    "Summary",
    "fire",
]

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


class AnalyticsError(Exception):
    """Raised when an analytics backend cannot record or query events."""


class Device(Enum):
    """Coarse device class of a visitor."""

    MOBILE = "mobile"
    DESKTOP = "desktop"
    BOT = "bot"
    OTHER = "other"

    def as_str(self) -> str:
        return self.value

    @classmethod
    def from_user_agent(cls, user_agent: str | None) -> Device:
        """Classify a User-Agent string; deliberately simple, no fingerprinting."""
        if user_agent is None:
            return cls.OTHER
        lower = user_agent.translate(_ASCII_LOWER)
        if any(word in lower for word in ("bot", "crawler", "spider", "curl", "wget")):
            return cls.BOT
        if any(word in lower for word in ("mobile", "android", "iphone")):
            return cls.MOBILE
        if "mozilla" in lower:
            return cls.DESKTOP
        return cls.OTHER


@dataclass(frozen=True)
class PageEvent:
    """A single anonymous page view or action."""

    path: str
    canonical_path: str
    kind: str
    method: str
    status: int
    referrer: str | None
    device: Device
    country: str | None
    response_ms: int
    ts: datetime
    session_id: str | None


@dataclass(frozen=True)
class FeatureEvent:
    """A behavioural signal; properties hold only categorical data, never PII."""

    session_id: str
    event: str
    properties: Any


class AnalyticsSink(ABC):
    """Write side of an analytics backend."""

    @abstractmethod
    async def record(self, event: PageEvent) -> None:
        """Store a page event."""

    @abstractmethod
    async def record_feature(self, event: FeatureEvent) -> None:
        """Store a feature event."""


@dataclass(frozen=True)
class DailyCount:
    day: date
    count: int


@dataclass(frozen=True)
class PathCount:
    path: str
    count: int


@dataclass(frozen=True)
class ReferrerCount:
    referrer: str
    count: int


@dataclass(frozen=True)
class CountryCount:
    country: str
    count: int


@dataclass(frozen=True)
class DeviceCount:
    device: str
    count: int


@dataclass(frozen=True)
class Summary:
    total_events: int
    unique_visitors: int
    unique_paths: int
    avg_response_ms: float
    bot_percentage: float


@dataclass(frozen=True)
class FeatureCount:
    event: str
    count: int


@dataclass(frozen=True)
class EngagementStats:
    """Session-level engagement: percentages and average page views per session."""

    bounce_rate: float
    return_visitor_rate: float
    avg_session_depth: float


@dataclass(frozen=True)
class HourCount:
    """Count per UTC hour (0-23)."""

    hour: int
    count: int


@dataclass(frozen=True)
class DayCount:
    """Count per UTC day of week (0 is Sunday)."""

    dow: int
    count: int


@dataclass(frozen=True)
class FunnelStats:
    """Conversion funnel: inventory, optimizer, save, share."""

    visited_inventory: int
    ran_optimizer: int
    saved_setup: int
    created_share: int


class AnalyticsQuery(ABC):
    """Read side of an analytics backend: aggregates only, never raw events."""

    @abstractmethod
    async def visits_per_day(self, days: int) -> list[DailyCount]: ...

    @abstractmethod
    async def top_paths(self, days: int, limit: int) -> list[PathCount]: ...

    @abstractmethod
    async def top_referrers(self, days: int, limit: int) -> list[ReferrerCount]: ...

    @abstractmethod
    async def top_countries(self, days: int, limit: int) -> list[CountryCount]: ...

    @abstractmethod
    async def device_breakdown(self, days: int) -> list[DeviceCount]: ...

    @abstractmethod
    async def summary(self, days: int) -> Summary: ...

    @abstractmethod
    async def feature_counts(self, days: int) -> list[FeatureCount]: ...

    @abstractmethod
    async def engagement(self, days: int) -> EngagementStats: ...

    @abstractmethod
    async def hourly_distribution(self, days: int) -> list[HourCount]: ...

    @abstractmethod
    async def day_of_week_distribution(self, days: int) -> list[DayCount]: ...

    @abstractmethod
    async def funnel(self, days: int) -> FunnelStats: ...


_pending: set[asyncio.Task[None]] = set()


def fire(handle: AnalyticsSink, session_id: str, event: str, props: Any) -> asyncio.Task[None]:
    """Record a feature event in the background; failures are ignored.

    Must be called from within a running event loop.
    """

    async def _send() -> None:
        try:
            await handle.record_feature(FeatureEvent(session_id, event, props))
        except AnalyticsError:
            pass

    task = asyncio.get_running_loop().create_task(_send())
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task