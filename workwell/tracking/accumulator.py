"""SessionAccumulator: running state of an in-progress posture session.

- Low-pass filters pitch/roll/yaw and keeps a bounded pitch history for charts
- Tracks the poor posture window and accrues its duration against a checkpoint
- Keeps pitch statistics for the finalized record
"""
from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, List, Optional, Union

from loguru import logger

from workwell.core.config import POOR_POSTURE_THRESHOLD, WARNING_THRESHOLD

from .classifier import PostureQuality, classify
from .motion import OrientationSample
from .session import PostureSession, poor_percentage


@dataclass(frozen=True)
class OpenWindow:
    """Poor posture window in progress; accrued up to ``checkpoint``."""

    since: datetime
    checkpoint: datetime


@dataclass(frozen=True)
class ClosedWindow:
    pass


CLOSED = ClosedWindow()
PoorWindow = Union[OpenWindow, ClosedWindow]


class SessionAccumulator:
    def __init__(
        self,
        smoothing_factor: float = 0.2,
        history_capacity: int = 100,
        poor_threshold: float = POOR_POSTURE_THRESHOLD,
        warning_threshold: float = WARNING_THRESHOLD,
    ) -> None:
        if not 0.0 < smoothing_factor <= 1.0:
            raise ValueError("smoothing_factor must be in (0, 1]")
        if history_capacity < 1:
            raise ValueError("history_capacity must be positive")
        self.smoothing_factor = float(smoothing_factor)
        self.history_capacity = int(history_capacity)
        self.poor_threshold = poor_threshold
        self.warning_threshold = warning_threshold
        self.start_time: Optional[datetime] = None
        self._reset_fields()

    def _reset_fields(self) -> None:
        self.pitch: float = 0.0
        self.roll: float = 0.0
        self.yaw: float = 0.0
        self.pitch_history: Deque[float] = deque(maxlen=self.history_capacity)
        self.quality: PostureQuality = PostureQuality.GOOD
        self.window: PoorWindow = CLOSED
        self.poor_posture_duration: float = 0.0
        self.session_duration: float = 0.0
        self.poor_posture_percentage: int = 0
        self.pitch_sum: float = 0.0
        self.pitch_count: int = 0
        self.min_pitch: float = 0.0
        self.max_pitch: float = 0.0

    @property
    def started(self) -> bool:
        return self.start_time is not None

    @property
    def in_poor_window(self) -> bool:
        return isinstance(self.window, OpenWindow)

    def history(self) -> List[float]:
        return list(self.pitch_history)

    def start(self, now: datetime) -> None:
        self._reset_fields()
        self.start_time = now

    def ingest_sample(self, sample: OrientationSample, now: Optional[datetime] = None) -> PostureQuality:
        """Fold one orientation sample into the session and return its band.

        ``now`` defaults to the sample timestamp. The first sample after
        ``start`` seeds the filter so a steady reading is reported as-is.
        """
        if self.start_time is None:
            raise RuntimeError("accumulator not started")
        if not all(math.isfinite(v) for v in (sample.pitch_degrees, sample.roll_degrees, sample.yaw_degrees)):
            logger.warning("Dropping non-finite orientation sample: {}", sample)
            return self.quality
        now = now or sample.timestamp
        if self.pitch_count == 0:
            self.pitch = sample.pitch_degrees
            self.roll = sample.roll_degrees
            self.yaw = sample.yaw_degrees
        else:
            keep = 1.0 - self.smoothing_factor
            self.pitch = self.pitch * keep + sample.pitch_degrees * self.smoothing_factor
            self.roll = self.roll * keep + sample.roll_degrees * self.smoothing_factor
            self.yaw = self.yaw * keep + sample.yaw_degrees * self.smoothing_factor

        self.pitch_history.append(self.pitch)
        self.quality = classify(self.pitch, self.poor_threshold, self.warning_threshold)
        self._apply_transition(self.quality, now)
        self._update_statistics(self.pitch)
        return self.quality

    def _apply_transition(self, quality: PostureQuality, now: datetime) -> None:
        if quality is PostureQuality.POOR:
            if isinstance(self.window, ClosedWindow):
                self.window = OpenWindow(since=now, checkpoint=now)
            # While open, time is credited by tick/finalize only
            return
        if isinstance(self.window, OpenWindow):
            self._accrue(now)
            self.window = CLOSED

    def _accrue(self, now: datetime) -> None:
        window = self.window
        if not isinstance(window, OpenWindow):
            return
        elapsed = (now - window.checkpoint).total_seconds()
        if elapsed > 0:
            self.poor_posture_duration += elapsed
            self.window = OpenWindow(since=window.since, checkpoint=now)

    def _update_statistics(self, pitch: float) -> None:
        self.pitch_sum += pitch
        self.pitch_count += 1
        if self.pitch_count == 1:
            self.min_pitch = pitch
            self.max_pitch = pitch
        else:
            self.min_pitch = min(self.min_pitch, pitch)
            self.max_pitch = max(self.max_pitch, pitch)

    def tick(self, now: datetime) -> None:
        if self.start_time is None:
            return
        self._accrue(now)
        self.session_duration = max(0.0, (now - self.start_time).total_seconds())
        self.poor_posture_percentage = poor_percentage(self.poor_posture_duration, self.session_duration)

    @property
    def average_pitch(self) -> float:
        return self.pitch_sum / self.pitch_count if self.pitch_count > 0 else 0.0

    def finalize(self, now: datetime) -> PostureSession:
        if self.start_time is None:
            raise RuntimeError("accumulator not started")
        self.tick(now)
        return PostureSession(
            start_time=self.start_time,
            end_time=now,
            poor_posture_duration=self.poor_posture_duration,
            average_pitch=self.average_pitch,
            min_pitch=self.min_pitch,
            max_pitch=self.max_pitch,
        )
