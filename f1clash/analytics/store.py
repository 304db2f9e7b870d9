"""SQLite-backed analytics: records page and feature events and answers aggregates."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from f1clash.analytics.domain import (
    AnalyticsError,
    AnalyticsQuery,
    AnalyticsSink,
    CountryCount,
    DailyCount,
    DayCount,
    DeviceCount,
    EngagementStats,
    FeatureCount,
    FeatureEvent,
    FunnelStats,
    HourCount,
    PageEvent,
    PathCount,
    ReferrerCount,
    Summary,
)

__all__ = ["SqliteAnalytics"]

_SCHEMA = """
CREATE TABLE IF NOT EXISTS page_events (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    path           TEXT    NOT NULL,
    canonical_path TEXT,
    kind           TEXT    NOT NULL DEFAULT 'page',
    method         TEXT    NOT NULL,
    status         INTEGER NOT NULL,
    referrer       TEXT,
    device         TEXT    NOT NULL,
    country        TEXT,
    response_ms    INTEGER NOT NULL,
    ts             TEXT    NOT NULL,
    session_id     TEXT
);
CREATE INDEX IF NOT EXISTS page_events_ts ON page_events (ts);
CREATE TABLE IF NOT EXISTS feature_events (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL,
    event      TEXT NOT NULL,
    properties TEXT NOT NULL DEFAULT '{}',
    ts         TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS feature_events_ts ON feature_events (ts);
"""

# Fixed-width UTC timestamps compare correctly as text.
_TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_ts(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(_TS_FORMAT)


class SqliteAnalytics(AnalyticsSink, AnalyticsQuery):
    """Analytics sink and query backend stored in an SQLite database."""

    def __init__(
        self,
        database: str | Path | sqlite3.Connection = ":memory:",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if isinstance(database, sqlite3.Connection):
            self.connection = database
            self._owns_connection = False
        else:
            self.connection = sqlite3.connect(str(database))
            self._owns_connection = True
        self._clock = clock or _utc_now
        try:
            self.connection.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise AnalyticsError(f"database error: {exc}") from exc

    def __enter__(self) -> SqliteAnalytics:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_connection:
            self.connection.close()

    # ── helpers ───────────────────────────────────────────────────────────────

    def _cutoff(self, days: int) -> str:
        return _format_ts(self._clock() - timedelta(days=days))

    def _fetchall(self, sql: str, params: Any) -> list[tuple[Any, ...]]:
        try:
            return self.connection.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise AnalyticsError(f"database error: {exc}") from exc

    def _fetchone(self, sql: str, params: Any) -> tuple[Any, ...]:
        rows = self._fetchall(sql, params)
        if not rows:
            raise AnalyticsError("database error: query returned no rows")
        return rows[0]

    def _modify(self, sql: str, params: Any) -> int:
        try:
            with self.connection:
                return self.connection.execute(sql, params).rowcount
        except sqlite3.Error as exc:
            raise AnalyticsError(f"database error: {exc}") from exc

    # ── maintenance ───────────────────────────────────────────────────────────

    async def prune(self, days: int) -> int:
        """Delete events older than `days`; returns how many rows were removed."""
        cutoff = self._cutoff(days)
        removed = self._modify("DELETE FROM page_events WHERE ts < ?", (cutoff,))
        removed += self._modify("DELETE FROM feature_events WHERE ts < ?", (cutoff,))
        return removed

    # ── sink ──────────────────────────────────────────────────────────────────

    async def record(self, event: PageEvent) -> None:
        self._modify(
            """INSERT INTO page_events
                   (path, canonical_path, kind, method, status, referrer,
                    device, country, response_ms, ts, session_id)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                event.path,
                event.canonical_path,
                event.kind,
                event.method,
                int(event.status),
                event.referrer,
                event.device.as_str(),
                event.country,
                int(event.response_ms),
                _format_ts(event.ts),
                event.session_id,
            ),
        )

    async def record_feature(self, event: FeatureEvent) -> None:
        try:
            properties = json.dumps(event.properties)
        except (TypeError, ValueError) as exc:
            raise AnalyticsError(f"serialization error: {exc}") from exc
        self._modify(
            "INSERT INTO feature_events (session_id, event, properties, ts) VALUES (?, ?, ?, ?)",
            (event.session_id, event.event, properties, _format_ts(self._clock())),
        )

    # ── queries ───────────────────────────────────────────────────────────────

    async def visits_per_day(self, days: int) -> list[DailyCount]:
        rows = self._fetchall(
            """SELECT substr(ts, 1, 10) AS day, COUNT(*)
               FROM page_events
               WHERE ts > ? AND device <> 'bot' AND kind = 'page'
               GROUP BY day
               ORDER BY day""",
            (self._cutoff(days),),
        )
        return [DailyCount(day=date.fromisoformat(day), count=count) for day, count in rows]

    async def top_paths(self, days: int, limit: int) -> list[PathCount]:
        rows = self._fetchall(
            """SELECT COALESCE(canonical_path, path) AS p, COUNT(*) AS c
               FROM page_events
               WHERE ts > ? AND device <> 'bot' AND kind = 'page'
               GROUP BY p
               ORDER BY c DESC, p
               LIMIT ?""",
            (self._cutoff(days), limit),
        )
        return [PathCount(path=path, count=count) for path, count in rows]

    async def top_referrers(self, days: int, limit: int) -> list[ReferrerCount]:
        rows = self._fetchall(
            """SELECT referrer, COUNT(*) AS c
               FROM page_events
               WHERE ts > ? AND device <> 'bot' AND referrer IS NOT NULL
               GROUP BY referrer
               ORDER BY c DESC, referrer
               LIMIT ?""",
            (self._cutoff(days), limit),
        )
        return [ReferrerCount(referrer=ref, count=count) for ref, count in rows]

    async def top_countries(self, days: int, limit: int) -> list[CountryCount]:
        rows = self._fetchall(
            """SELECT country, COUNT(*) AS c
               FROM page_events
               WHERE ts > ? AND device <> 'bot' AND country IS NOT NULL
               GROUP BY country
               ORDER BY c DESC, country
               LIMIT ?""",
            (self._cutoff(days), limit),
        )
        return [CountryCount(country=country, count=count) for country, count in rows]

    async def device_breakdown(self, days: int) -> list[DeviceCount]:
        rows = self._fetchall(
            """SELECT device, COUNT(*) AS c
               FROM page_events
               WHERE ts > ?
               GROUP BY device
               ORDER BY c DESC, device""",
            (self._cutoff(days),),
        )
        return [DeviceCount(device=device, count=count) for device, count in rows]

    async def summary(self, days: int) -> Summary:
        total, visitors, paths, avg_ms, bot_pct = self._fetchone(
            """SELECT
                   COUNT(*),
                   COUNT(DISTINCT session_id),
                   COUNT(DISTINCT COALESCE(canonical_path, path)),
                   AVG(response_ms),
                   100.0 * SUM(CASE WHEN device = 'bot' THEN 1 ELSE 0 END)
                       / NULLIF(COUNT(*), 0)
               FROM page_events
               WHERE ts > ?""",
            (self._cutoff(days),),
        )
        return Summary(
            total_events=total,
            unique_visitors=visitors,
            unique_paths=paths,
            avg_response_ms=float(avg_ms) if avg_ms is not None else 0.0,
            bot_percentage=float(bot_pct) if bot_pct is not None else 0.0,
        )

    async def feature_counts(self, days: int) -> list[FeatureCount]:
        rows = self._fetchall(
            """SELECT event, COUNT(*) AS c
               FROM feature_events
               WHERE ts > ?
               GROUP BY event
               ORDER BY c DESC, event""",
            (self._cutoff(days),),
        )
        return [FeatureCount(event=event, count=count) for event, count in rows]

    async def engagement(self, days: int) -> EngagementStats:
        cutoff = self._cutoff(days)
        avg_depth, bounce = self._fetchone(
            """SELECT
                   AVG(page_count),
                   100.0 * SUM(CASE WHEN page_count = 1 THEN 1 ELSE 0 END)
                       / NULLIF(COUNT(*), 0)
               FROM (
                   SELECT session_id, COUNT(*) AS page_count
                   FROM page_events
                   WHERE ts > ? AND device <> 'bot' AND kind = 'page'
                     AND session_id IS NOT NULL
                   GROUP BY session_id
               )""",
            (cutoff,),
        )
        (returning,) = self._fetchone(
            """SELECT
                   100.0 * SUM(CASE WHEN day_count > 1 THEN 1 ELSE 0 END)
                       / NULLIF(COUNT(*), 0)
               FROM (
                   SELECT session_id, COUNT(DISTINCT substr(ts, 1, 10)) AS day_count
                   FROM page_events
                   WHERE ts > ? AND device <> 'bot' AND session_id IS NOT NULL
                   GROUP BY session_id
               )""",
            (cutoff,),
        )
        return EngagementStats(
            bounce_rate=float(bounce) if bounce is not None else 0.0,
            return_visitor_rate=float(returning) if returning is not None else 0.0,
            avg_session_depth=float(avg_depth) if avg_depth is not None else 0.0,
        )

    async def hourly_distribution(self, days: int) -> list[HourCount]:
        rows = self._fetchall(
            """SELECT CAST(substr(ts, 12, 2) AS INTEGER) AS hour, COUNT(*)
               FROM page_events
               WHERE ts > ? AND device <> 'bot' AND kind = 'page'
               GROUP BY hour
               ORDER BY hour""",
            (self._cutoff(days),),
        )
        return [HourCount(hour=hour, count=count) for hour, count in rows]

    async def day_of_week_distribution(self, days: int) -> list[DayCount]:
        rows = self._fetchall(
            """SELECT CAST(strftime('%w', substr(ts, 1, 10)) AS INTEGER) AS dow, COUNT(*)
               FROM page_events
               WHERE ts > ? AND device <> 'bot' AND kind = 'page'
               GROUP BY dow
               ORDER BY dow""",
            (self._cutoff(days),),
        )
        return [DayCount(dow=dow, count=count) for dow, count in rows]

    async def funnel(self, days: int) -> FunnelStats:
        row = self._fetchone(
            """WITH
                 inv AS (
                   SELECT DISTINCT session_id FROM page_events
                   WHERE COALESCE(canonical_path, path) = '/inventory'
                     AND kind = 'page' AND device <> 'bot' AND ts > :cutoff
                 ),
                 opt AS (
                   SELECT DISTINCT session_id FROM feature_events
                   WHERE event IN ('optimizer_run', 'optimizer_presets') AND ts > :cutoff
                 ),
                 sav AS (
                   SELECT DISTINCT session_id FROM feature_events
                   WHERE event = 'optimizer_save' AND ts > :cutoff
                 ),
                 shr AS (
                   SELECT DISTINCT session_id FROM feature_events
                   WHERE event = 'share_create' AND ts > :cutoff
                 )
               SELECT
                   (SELECT COUNT(*) FROM inv),
                   (SELECT COUNT(*) FROM opt),
                   (SELECT COUNT(*) FROM sav),
                   (SELECT COUNT(*) FROM shr)""",
            {"cutoff": self._cutoff(days)},
        )
        return FunnelStats(
            visited_inventory=row[0],
            ran_optimizer=row[1],
            saved_setup=row[2],
            created_share=row[3],
        )