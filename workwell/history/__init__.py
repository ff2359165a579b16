"""History package exports."""

from .aggregator import (
    HistorySummary,
    Timeframe,
    TrendPoint,
    average_poor_posture,
    average_session_duration,
    best_posture_score,
    best_session,
    filter_sessions,
    session_score,
    summarize,
    total_session_time,
    trend,
    worst_session,
)
from .export import CSV_HEADER, export_csv
from .formatting import format_duration, format_duration_compact

__all__ = [
    "CSV_HEADER",
    "HistorySummary",
    "Timeframe",
    "TrendPoint",
    "average_poor_posture",
    "average_session_duration",
    "best_posture_score",
    "best_session",
    "export_csv",
    "filter_sessions",
    "format_duration",
    "format_duration_compact",
    "session_score",
    "summarize",
    "total_session_time",
    "trend",
    "worst_session",
]
