"""Posture tracking package exports."""

from .accumulator import SessionAccumulator
from .classifier import PostureAnalysis, PostureQuality, analyze, classify
from .lifecycle import (
    LiveMetrics,
    SensorFailure,
    SensorUnavailable,
    SessionLifecycleManager,
    TrackingError,
    TrackingState,
)
from .motion import AttitudeReading, OrientationSample, PushMotionSource, SimulatedMotionSource
from .session import PostureSession

__all__ = [
    "AttitudeReading",
    "LiveMetrics",
    "OrientationSample",
    "PostureAnalysis",
    "PostureQuality",
    "PostureSession",
    "PushMotionSource",
    "SensorFailure",
    "SensorUnavailable",
    "SessionAccumulator",
    "SessionLifecycleManager",
    "SimulatedMotionSource",
    "TrackingError",
    "TrackingState",
    "analyze",
    "classify",
]
