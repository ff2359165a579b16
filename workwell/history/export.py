"""CSV export of finalized sessions."""
from __future__ import annotations

from datetime import tzinfo
from typing import Iterable, Iterator

from workwell.tracking.session import PostureSession, as_utc

from .aggregator import UTC

CSV_HEADER = (
    "Date,Start Time,End Time,Duration (min),Poor Posture Duration (min),"
    "Poor Posture %,Average Pitch,Min Pitch,Max Pitch"
)


def csv_row(session: PostureSession, tz: tzinfo = UTC) -> str:
    start = as_utc(session.start_time).astimezone(tz)
    end = as_utc(session.end_time).astimezone(tz)
    return (
        f'"{start:%Y-%m-%d}","{start:%H:%M}","{end:%H:%M}",'
        f"{int(session.total_duration // 60)},"
        f"{int(session.poor_posture_duration // 60)},"
        f"{session.poor_posture_percentage},"
        f"{session.average_pitch:.1f},{session.min_pitch:.1f},{session.max_pitch:.1f}"
    )


def iter_csv(sessions: Iterable[PostureSession], tz: tzinfo = UTC) -> Iterator[str]:
    """Yield the header and one line per session, each newline-terminated."""
    yield CSV_HEADER + "\n"
    for session in sessions:
        yield csv_row(session, tz) + "\n"


def export_csv(sessions: Iterable[PostureSession], tz: tzinfo = UTC) -> str:
    return "".join(iter_csv(sessions, tz))
