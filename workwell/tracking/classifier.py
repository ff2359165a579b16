"""Posture quality classification from head pitch."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from workwell.core.config import POOR_POSTURE_THRESHOLD, WARNING_THRESHOLD


class PostureQuality(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    POOR = "poor"

    @property
    def message(self) -> str:
        return _MESSAGES[self]

    @property
    def recommendation(self) -> str:
        return _RECOMMENDATIONS[self]


_MESSAGES = {
    PostureQuality.GOOD: "Good posture",
    PostureQuality.WARNING: "Posture declining",
    PostureQuality.POOR: "Poor posture detected",
}

_RECOMMENDATIONS = {
    PostureQuality.GOOD: "Great posture! Keep it up",
    PostureQuality.WARNING: "Your posture is declining, adjust your position",
    PostureQuality.POOR: "Lift your chin up and straighten your neck",
}


@dataclass(frozen=True)
class PostureAnalysis:
    quality: PostureQuality
    pitch: float
    recommendation: str


def classify(
    pitch: float,
    poor_threshold: float = POOR_POSTURE_THRESHOLD,
    warning_threshold: float = WARNING_THRESHOLD,
) -> PostureQuality:
    """Map a pitch in degrees to its quality band.

    Comparisons are strict, so a pitch sitting exactly on a threshold falls in
    the milder band (``-20.0`` is WARNING, ``-15.0`` is GOOD).
    """
    if pitch < poor_threshold:
        return PostureQuality.POOR
    if pitch < warning_threshold:
        return PostureQuality.WARNING
    return PostureQuality.GOOD


def analyze(
    pitch: float,
    poor_threshold: float = POOR_POSTURE_THRESHOLD,
    warning_threshold: float = WARNING_THRESHOLD,
) -> PostureAnalysis:
    quality = classify(pitch, poor_threshold, warning_threshold)
    return PostureAnalysis(quality=quality, pitch=pitch, recommendation=quality.recommendation)
