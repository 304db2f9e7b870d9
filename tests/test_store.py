import asyncio
import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from f1clash.analytics.domain import (
    AnalyticsError,
    DailyCount,
    Device,
    EngagementStats,
    FeatureEvent,
    FunnelStats,
    HourCount,
    PageEvent,
    Summary,
)
from f1clash.analytics.store import SqliteAnalytics

NOW = datetime(2025, 4, 25, 12, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def page(
    path="/inventory",
    *,
    ago=timedelta(hours=1),
    ts=None,
    device=Device.DESKTOP,
    kind="page",
    session="s1",
    referrer=None,
    country=None,
    response_ms=10,
    canonical=None,
):
    return PageEvent(
        path=path,
        canonical_path=canonical if canonical is not None else path,
        kind=kind,
        method="GET" if kind == "page" else "POST",
        status=200,
        referrer=referrer,
        device=device,
        country=country,
        response_ms=response_ms,
        ts=ts if ts is not None else NOW - ago,
        session_id=session,
    )


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def clock():
    return Clock(NOW)


@pytest.fixture
def store(clock):
    with SqliteAnalytics(clock=clock) as analytics:
        yield analytics


def record_all(store, events):
    for event in events:
        run(store.record(event))


def test_visits_per_day_counts_only_human_page_views(store):
    record_all(
        store,
        [
            page(),
            page(session="s2"),
            page(device=Device.BOT),
            page(kind="action"),
        ],
    )
    assert run(store.visits_per_day(30)) == [DailyCount(NOW.date(), 2)]


def test_old_events_fall_outside_the_window(store):
    record_all(store, [page(ago=timedelta(days=40))])
    assert run(store.visits_per_day(30)) == []
    assert len(run(store.visits_per_day(60))) == 1


def test_top_paths_ordered_by_count_and_limited(store):
    record_all(
        store,
        [page("/inventory"), page("/inventory"), page("/setups/4", canonical="/setups/:id")],
    )
    paths = run(store.top_paths(30, 10))
    assert [p.path for p in paths] == ["/inventory", "/setups/:id"]
    assert paths[0].count >= paths[1].count
    assert len(run(store.top_paths(30, 1))) == 1


def test_top_referrers_skip_missing_and_bots(store):
    record_all(
        store,
        [
            page(referrer="news.example.com"),
            page(referrer=None),
            page(referrer="bots.example.com", device=Device.BOT),
        ],
    )
    refs = run(store.top_referrers(30, 10))
    assert [r.referrer for r in refs] == ["news.example.com"]


def test_top_countries_skip_missing(store):
    record_all(store, [page(country="DE"), page(country="DE"), page(country=None)])
    countries = run(store.top_countries(30, 10))
    assert [c.country for c in countries] == ["DE"]
    assert countries[0].count == len([1, 1])


def test_device_breakdown_includes_bots(store):
    events = [page(), page(device=Device.BOT), page(device=Device.BOT)]
    record_all(store, events)
    devices = run(store.device_breakdown(30))
    assert {d.device for d in devices} == {"bot", "desktop"}
    assert devices[0].device == "bot"
    assert sum(d.count for d in devices) == len(events)


def test_summary_empty_is_zero(store):
    assert run(store.summary(30)) == Summary(0, 0, 0, 0.0, 0.0)


def test_summary_aggregates(store):
    events = [
        page("/inventory", session="a", response_ms=10),
        page("/setups", session="b", response_ms=30),
        page("/setups", session="b", response_ms=50),
    ]
    record_all(store, events)
    result = run(store.summary(30))
    assert result.total_events == len(events)
    assert result.unique_visitors == len({e.session_id for e in events})
    assert result.unique_paths == len({e.canonical_path for e in events})
    assert result.avg_response_ms == pytest.approx(
        sum(e.response_ms for e in events) / len(events)
    )
    assert result.bot_percentage == 0.0


def test_summary_all_bots_is_hundred_percent(store):
    record_all(store, [page(device=Device.BOT), page(device=Device.BOT)])
    assert run(store.summary(30)).bot_percentage == pytest.approx(100.0)


def test_feature_counts_round_trip(store):
    for name in ["optimizer_run", "optimizer_run", "share_create"]:
        run(store.record_feature(FeatureEvent("s1", name, {"preset": "speed"})))
    counts = run(store.feature_counts(30))
    assert [c.event for c in counts] == ["optimizer_run", "share_create"]
    assert counts[0].count > counts[1].count


def test_feature_properties_must_be_serialisable(store):
    with pytest.raises(AnalyticsError):
        run(store.record_feature(FeatureEvent("s1", "x", {"bad": object()})))


def test_engagement_empty_is_zero(store):
    assert run(store.engagement(30)) == EngagementStats(0.0, 0.0, 0.0)


def test_engagement_single_page_session_bounces(store):
    record_all(store, [page(session="solo")])
    stats = run(store.engagement(30))
    assert stats.bounce_rate == pytest.approx(100.0)
    assert stats.avg_session_depth == pytest.approx(1.0)
    assert stats.return_visitor_rate == 0.0


def test_engagement_return_visitor_across_days(store):
    record_all(
        store,
        [page(session="r", ago=timedelta(hours=1)), page(session="r", ago=timedelta(days=2))],
    )
    stats = run(store.engagement(30))
    assert stats.return_visitor_rate == pytest.approx(100.0)
    assert stats.bounce_rate == 0.0


def test_hourly_and_day_of_week(store):
    ts = datetime(2025, 4, 25, 9, 30, tzinfo=timezone.utc)
    record_all(store, [page(ts=ts)])
    assert run(store.hourly_distribution(30)) == [HourCount(ts.hour, 1)]
    (dow,) = run(store.day_of_week_distribution(30))
    assert dow.dow == int(ts.strftime("%w"))


def test_non_utc_timestamp_is_stored_as_utc(store):
    local = timezone(timedelta(hours=2))
    ts = datetime(2025, 4, 25, 1, 0, tzinfo=local)
    record_all(store, [page(ts=ts)])
    (day,) = run(store.visits_per_day(30))
    assert day.day == ts.astimezone(timezone.utc).date()


def test_funnel_counts_distinct_sessions(store):
    record_all(store, [page("/inventory", session="s1"), page("/inventory", session="s2")])
    for session, name in [
        ("s1", "optimizer_run"),
        ("s1", "optimizer_presets"),
        ("s1", "optimizer_save"),
    ]:
        run(store.record_feature(FeatureEvent(session, name, {})))
    assert run(store.funnel(30)) == FunnelStats(2, 1, 1, 0)


def test_prune_removes_old_rows(store, clock):
    clock.now = NOW - timedelta(days=45)
    run(store.record_feature(FeatureEvent("s1", "optimizer_run", {})))
    clock.now = NOW
    run(store.record_feature(FeatureEvent("s1", "optimizer_run", {})))
    record_all(store, [page(ago=timedelta(days=45)), page()])
    assert run(store.prune(30)) == 2
    assert sum(d.count for d in run(store.device_breakdown(365))) == 1
    assert sum(c.count for c in run(store.feature_counts(365))) == 1


def test_closed_connection_raises_analytics_error():
    connection = sqlite3.connect(":memory:")
    analytics = SqliteAnalytics(connection, clock=Clock(NOW))
    connection.close()
    with pytest.raises(AnalyticsError):
        run(analytics.summary(30))