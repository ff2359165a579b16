"""History aggregates over finalized posture sessions.

Pure functions: callers pass the session list explicitly (usually from
``SessionStore.list_all()``) together with the reference instant.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from workwell.tracking.session import PostureSession, as_utc


class Timeframe(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    @property
    def label(self) -> str:
        return {"today": "Today", "week": "Week", "month": "Month", "all": "All"}[self.value]


UTC = timezone.utc


@dataclass(frozen=True)
class TrendPoint:
    start_time: datetime
    poor_posture_percentage: int


@dataclass
class HistorySummary:
    timeframe: Timeframe
    session_count: int
    average_poor_posture: int
    total_session_time: float
    average_session_duration: float
    best_session: Optional[PostureSession]
    worst_session: Optional[PostureSession]
    best_posture_score: Optional[int]
    trend: List[TrendPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "timeframe": self.timeframe.value,
            "session_count": self.session_count,
            "average_poor_posture": self.average_poor_posture,
            "total_session_time": self.total_session_time,
            "average_session_duration": self.average_session_duration,
            "best_session": self.best_session.to_dict() if self.best_session else None,
            "worst_session": self.worst_session.to_dict() if self.worst_session else None,
            "best_posture_score": self.best_posture_score,
            "trend": [
                {"start_time": p.start_time.isoformat(), "poor_posture_percentage": p.poor_posture_percentage}
                for p in self.trend
            ],
        }


def months_before(moment: datetime, months: int = 1) -> datetime:
    """Step back whole calendar months, clamping the day (Mar 31 -> Feb 28)."""
    year = moment.year
    month = moment.month - months
    while month < 1:
        month += 12
        year -= 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def filter_sessions(
    sessions: Iterable[PostureSession],
    timeframe: Timeframe,
    now: datetime,
    tz: tzinfo = UTC,
) -> List[PostureSession]:
    """Keep the sessions whose start falls in ``timeframe`` relative to ``now``.

    TODAY compares calendar days in ``tz``; WEEK and MONTH keep starts at or
    after the cutoff; ALL keeps everything. Input order is preserved.
    """
    items = list(sessions)
    if timeframe is Timeframe.ALL:
        return items
    local_now = as_utc(now).astimezone(tz)
    if timeframe is Timeframe.TODAY:
        today = local_now.date()
        return [s for s in items if as_utc(s.start_time).astimezone(tz).date() == today]
    if timeframe is Timeframe.WEEK:
        cutoff = local_now - timedelta(days=7)
    else:
        cutoff = months_before(local_now, 1)
    return [s for s in items if as_utc(s.start_time) >= cutoff]


def sort_for_display(sessions: Iterable[PostureSession]) -> List[PostureSession]:
    return sorted(sessions, key=lambda s: as_utc(s.start_time), reverse=True)


def average_poor_posture(sessions: Sequence[PostureSession]) -> int:
    if not sessions:
        return 0
    return sum(s.poor_posture_percentage for s in sessions) // len(sessions)


def total_session_time(sessions: Iterable[PostureSession]) -> float:
    return sum(s.total_duration for s in sessions)


def average_session_duration(sessions: Sequence[PostureSession]) -> float:
    if not sessions:
        return 0.0
    return total_session_time(sessions) / len(sessions)


def best_session(sessions: Iterable[PostureSession]) -> Optional[PostureSession]:
    """Lowest poor posture percentage; the first one wins ties."""
    return min(sessions, key=lambda s: s.poor_posture_percentage, default=None)


def worst_session(sessions: Iterable[PostureSession]) -> Optional[PostureSession]:
    """Highest poor posture percentage; the first one wins ties."""
    return max(sessions, key=lambda s: s.poor_posture_percentage, default=None)


def session_score(session: PostureSession) -> int:
    # Up to 10 bonus points, one per 10 minutes tracked
    base = 100 - session.poor_posture_percentage
    bonus = min(int(session.total_duration // 600), 10)
    return min(base + bonus, 100)


def best_posture_score(sessions: Iterable[PostureSession]) -> Optional[int]:
    best = best_session(sessions)
    if best is None:
        return None
    return 100 - best.poor_posture_percentage


def trend(sessions: Iterable[PostureSession], limit: int = 10) -> List[TrendPoint]:
    """Poor posture percentage of the ``limit`` most recent sessions, oldest first."""
    recent = sort_for_display(sessions)[: max(0, limit)]
    return [
        TrendPoint(start_time=s.start_time, poor_posture_percentage=s.poor_posture_percentage)
        for s in reversed(recent)
    ]


def summarize(
    sessions: Iterable[PostureSession],
    timeframe: Timeframe,
    now: datetime,
    tz: tzinfo = UTC,
    trend_limit: int = 10,
) -> HistorySummary:
    ordered = sort_for_display(filter_sessions(sessions, timeframe, now, tz))
    return HistorySummary(
        timeframe=timeframe,
        session_count=len(ordered),
        average_poor_posture=average_poor_posture(ordered),
        total_session_time=total_session_time(ordered),
        average_session_duration=average_session_duration(ordered),
        best_session=best_session(ordered),
        worst_session=worst_session(ordered),
        best_posture_score=best_posture_score(ordered),
        trend=trend(ordered, trend_limit),
    )
