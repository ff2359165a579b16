from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from workwell.history import CSV_HEADER, export_csv
from workwell.tracking.session import PostureSession


def _sample_session() -> PostureSession:
    start = datetime(2026, 10, 19, 9, 5, 0, tzinfo=timezone.utc)
    return PostureSession(
        start_time=start,
        end_time=start + timedelta(minutes=45, seconds=30),
        poor_posture_duration=630.0,
        average_pitch=-12.34,
        min_pitch=-30.06,
        max_pitch=2.0,
    )


def test_header_matches_export_contract():
    assert CSV_HEADER == (
        "Date,Start Time,End Time,Duration (min),Poor Posture Duration (min),"
        "Poor Posture %,Average Pitch,Min Pitch,Max Pitch"
    )
    assert export_csv([]) == CSV_HEADER + "\n"


def test_row_formatting():
    lines = export_csv([_sample_session()]).splitlines()
    assert lines[0] == CSV_HEADER
    assert lines[1] == '"2026-10-19","09:05","09:50",45,10,23,-12.3,-30.1,2.0'


def test_rows_use_requested_timezone():
    body = export_csv([_sample_session()], ZoneInfo("Asia/Kolkata"))
    assert body.splitlines()[1].startswith('"2026-10-19","14:35","15:20",')
