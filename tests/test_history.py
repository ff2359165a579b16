from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from workwell.history import (
    Timeframe,
    average_poor_posture,
    average_session_duration,
    best_posture_score,
    best_session,
    filter_sessions,
    format_duration,
    format_duration_compact,
    session_score,
    summarize,
    total_session_time,
    trend,
    worst_session,
)
from workwell.history.aggregator import months_before
from workwell.tracking.session import PostureSession

NOW = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)


def _session(start: datetime, minutes: float = 10, poor_minutes: float = 0, **kwargs) -> PostureSession:
    return PostureSession(
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        poor_posture_duration=poor_minutes * 60,
        **kwargs,
    )


def test_poor_percentage_is_floor_and_safe_for_empty_sessions():
    assert _session(NOW, minutes=6, poor_minutes=5).poor_posture_percentage == 83
    assert _session(NOW, minutes=0, poor_minutes=0).poor_posture_percentage == 0
    s = _session(NOW, minutes=60, poor_minutes=15)
    assert s.total_duration == 3600
    assert s.good_posture_duration == 2700


def test_filter_today_uses_calendar_day():
    earlier_today = _session(datetime(2026, 10, 19, 0, 10, tzinfo=timezone.utc))
    yesterday = _session(datetime(2026, 10, 18, 23, 30, tzinfo=timezone.utc))
    kept = filter_sessions([earlier_today, yesterday], Timeframe.TODAY, NOW)
    assert kept == [earlier_today]


def test_filter_today_respects_timezone():
    # 03:00 UTC on the 19th is still the 18th in New York
    late_evening = _session(datetime(2026, 10, 19, 3, 0, tzinfo=timezone.utc))
    morning = _session(datetime(2026, 10, 19, 5, 0, tzinfo=timezone.utc))
    kept = filter_sessions([late_evening, morning], Timeframe.TODAY, NOW, ZoneInfo("America/New_York"))
    assert kept == [morning]


def test_filter_week_boundary_is_inclusive():
    on_cutoff = _session(NOW - timedelta(days=7))
    before_cutoff = _session(NOW - timedelta(days=7, seconds=1))
    kept = filter_sessions([on_cutoff, before_cutoff], Timeframe.WEEK, NOW)
    assert kept == [on_cutoff]


def test_filter_month_uses_calendar_months():
    now = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)
    assert months_before(now) == datetime(2026, 2, 28, 12, 0, tzinfo=timezone.utc)
    assert months_before(datetime(2026, 1, 15, tzinfo=timezone.utc)) == datetime(2025, 12, 15, tzinfo=timezone.utc)
    on_cutoff = _session(datetime(2026, 2, 28, 12, 0, tzinfo=timezone.utc))
    too_old = _session(datetime(2026, 2, 28, 11, 59, tzinfo=timezone.utc))
    assert filter_sessions([on_cutoff, too_old], Timeframe.MONTH, now) == [on_cutoff]


def test_filter_all_returns_everything():
    sessions = [_session(NOW - timedelta(days=400)), _session(NOW)]
    assert filter_sessions(sessions, Timeframe.ALL, NOW) == sessions


def test_averages_and_totals():
    sessions = [
        _session(NOW, minutes=10, poor_minutes=1),  # 10%
        _session(NOW, minutes=20, poor_minutes=3),  # 15%
    ]
    assert average_poor_posture(sessions) == 12
    assert average_poor_posture([]) == 0
    assert total_session_time(sessions) == 1800
    assert average_session_duration(sessions) == 900
    assert average_session_duration([]) == 0.0


def test_best_and_worst_prefer_first_on_ties():
    a = _session(NOW, minutes=10, poor_minutes=2)
    b = _session(NOW, minutes=10, poor_minutes=2)
    c = _session(NOW, minutes=10, poor_minutes=5)
    d = _session(NOW, minutes=10, poor_minutes=5)
    assert best_session([a, b, c, d]) is a
    assert worst_session([a, b, c, d]) is c
    assert best_session([]) is None
    assert worst_session([]) is None
    assert best_posture_score([a, c]) == 80
    assert best_posture_score([]) is None


def test_session_score_bonus():
    assert session_score(_session(NOW, minutes=60, poor_minutes=6)) == 96
    assert session_score(_session(NOW, minutes=200, poor_minutes=0)) == 100
    assert session_score(_session(NOW, minutes=5, poor_minutes=5)) == 0


def test_trend_is_chronological_and_limited():
    sessions = [_session(NOW - timedelta(days=i), minutes=10, poor_minutes=i % 10) for i in range(15)]
    points = trend(sessions, limit=10)
    assert len(points) == 10
    starts = [p.start_time for p in points]
    assert starts == sorted(starts)
    assert points[-1].start_time == NOW
    assert points[0].start_time == NOW - timedelta(days=9)
    assert points[0].poor_posture_percentage == 90


def test_summarize_bundles_filtered_aggregates():
    recent = _session(NOW - timedelta(days=1), minutes=30, poor_minutes=3)
    newest = _session(NOW - timedelta(hours=1), minutes=30, poor_minutes=3)
    old = _session(NOW - timedelta(days=20), minutes=30, poor_minutes=30)
    summary = summarize([recent, old, newest], Timeframe.WEEK, NOW)
    assert summary.session_count == 2
    assert summary.average_poor_posture == 10
    assert summary.total_session_time == 3600
    # equal percentages: the most recent session comes first in display order
    assert summary.best_session is newest
    assert summary.best_posture_score == 90
    assert [p.start_time for p in summary.trend] == [recent.start_time, newest.start_time]
    data = summary.to_dict()
    assert data["timeframe"] == "week"
    assert data["best_session"]["id"] == newest.id


def test_summarize_empty():
    summary = summarize([], Timeframe.TODAY, NOW)
    assert summary.session_count == 0
    assert summary.average_poor_posture == 0
    assert summary.best_session is None
    assert summary.trend == []


@pytest.mark.parametrize(
    "seconds,expected",
    [(5, "5s"), (65, "1m 5s"), (3600 + 120 + 9, "1h 2m"), (-3, "0s")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_duration_compact():
    assert format_duration_compact(59) == "0m"
    assert format_duration_compact(150) == "2m"
    assert format_duration_compact(7260) == "2h 1m"
