"""Finalized posture session record."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class PostureSession:
    """Immutable summary of one tracking interval.

    Durations are seconds. ``poor_posture_percentage`` is floor-truncated.
    """

    start_time: datetime
    end_time: datetime
    poor_posture_duration: float = 0.0
    average_pitch: float = 0.0
    min_pitch: float = 0.0
    max_pitch: float = 0.0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def total_duration(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def good_posture_duration(self) -> float:
        return self.total_duration - self.poor_posture_duration

    @property
    def poor_posture_percentage(self) -> int:
        return poor_percentage(self.poor_posture_duration, self.total_duration)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "total_duration": self.total_duration,
            "poor_posture_duration": self.poor_posture_duration,
            "good_posture_duration": self.good_posture_duration,
            "poor_posture_percentage": self.poor_posture_percentage,
            "average_pitch": self.average_pitch,
            "min_pitch": self.min_pitch,
            "max_pitch": self.max_pitch,
        }

    @classmethod
    def from_record(cls, row: Any) -> "PostureSession":
        """Build from a ``PostureSessionRecord`` row (naive UTC columns)."""
        return cls(
            id=row.id,
            start_time=as_utc(row.started_at_utc),
            end_time=as_utc(row.ended_at_utc),
            poor_posture_duration=float(row.poor_posture_sec or 0.0),
            average_pitch=float(row.average_pitch or 0.0),
            min_pitch=float(row.min_pitch or 0.0),
            max_pitch=float(row.max_pitch or 0.0),
        )


def poor_percentage(poor_seconds: float, total_seconds: float) -> int:
    if total_seconds <= 0:
        return 0
    return int(poor_seconds * 100 / total_seconds)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
