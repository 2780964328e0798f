from datetime import timedelta

from vibedev_analytics.models.view_event import ViewEvent
from vibedev_analytics.services.view_stats import (
    delete_content_views,
    get_most_viewed,
    get_platform_view_stats,
    get_view_stats,
    get_views_time_series,
    weekly_views,
)
from vibedev_analytics.utils import analytics_date


def add_view(db, clock, session_id, content_id, days_ago=0, content_type="project"):
    when = clock.now - timedelta(days=days_ago)
    db.add(ViewEvent(
        content_type=content_type,
        content_id=content_id,
        session_id=session_id,
        view_date=analytics_date(when),
        created_at=when,
    ))
    db.commit()


def test_stats_for_content_without_views(db, clock):
    stats = get_view_stats(db, "project", "nothing", clock=clock)

    assert stats.total_views == 0
    assert stats.unique_visitors == 0
    assert stats.today_views == 0
    assert stats.weekly_views == 0


def test_counters_by_day(db, clock):
    add_view(db, clock, "s1", "p1")
    add_view(db, clock, "s2", "p1")
    add_view(db, clock, "s3", "p1", days_ago=6)
    add_view(db, clock, "s4", "p1", days_ago=7)
    add_view(db, clock, "s5", "p2")

    stats = get_view_stats(db, "project", "p1", clock=clock)

    assert stats.total_views == 4
    assert stats.unique_visitors == 4
    assert stats.today_views == 2
    assert stats.weekly_views == 3
    assert stats.today_views <= stats.weekly_views <= stats.total_views


def test_unique_visitors_counts_distinct_sessions(db, clock):
    # Filas duplicadas (carrera entre pestañas) suman vistas pero no visitantes
    add_view(db, clock, "s1", "p1")
    add_view(db, clock, "s1", "p1")
    add_view(db, clock, "s2", "p1")

    stats = get_view_stats(db, "project", "p1", clock=clock)

    assert stats.total_views == 3
    assert stats.unique_visitors == 2


def test_weekly_views_ignores_future_dates(db, clock):
    add_view(db, clock, "s1", "p1", days_ago=-1)

    assert weekly_views(db, "project", "p1", now=clock.now) == 0


def test_platform_stats(db, clock):
    add_view(db, clock, "s1", "p1")
    add_view(db, clock, "s1", "p2", days_ago=2)
    add_view(db, clock, "s2", "p1", days_ago=1)

    stats = get_platform_view_stats(db, clock=clock)

    assert stats.total_views == 3
    assert stats.unique_sessions == 2
    assert stats.views_today == 1
    assert stats.views_by_type == {"project": 3, "post": 0}


def test_most_viewed_ordering(db, clock):
    for i in range(3):
        add_view(db, clock, f"s{i}", "b-project")
    for i in range(3):
        add_view(db, clock, f"s{i}", "a-project")
    add_view(db, clock, "s1", "c-project")
    add_view(db, clock, "s1", "post-1", content_type="post")

    items = get_most_viewed(db, "project", limit=2)

    assert [item.content_id for item in items] == ["a-project", "b-project"]
    assert items[0].views == 3
    assert items[0].unique_visitors == 3


def test_time_series_is_zero_filled(db, clock):
    add_view(db, clock, "s1", "p1")
    add_view(db, clock, "s2", "p1")
    add_view(db, clock, "s3", "p1", days_ago=2)
    add_view(db, clock, "s4", "p1", days_ago=10)

    series = get_views_time_series(db, days=7, clock=clock)

    assert len(series.dates) == 7
    assert series.dates[-1] == "2026-10-19"
    assert series.dates[0] == "2026-10-13"
    assert series.views == [0, 0, 0, 0, 1, 0, 2]


def test_delete_content_views(db, clock):
    add_view(db, clock, "s1", "p1")
    add_view(db, clock, "s2", "p1")
    add_view(db, clock, "s1", "p2")

    assert delete_content_views(db, "project", "p1") == 2
    assert get_view_stats(db, "project", "p1", clock=clock).total_views == 0
    assert get_view_stats(db, "project", "p2", clock=clock).total_views == 1
