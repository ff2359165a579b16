"""Session lifecycle: start, tick and stop posture tracking.

States: idle -> connecting -> active -> idle, with error reachable from
connecting (sensor failure or connect timeout) and left via retry or cancel.
All callbacks are expected on one serial context (the asyncio loop); every
transition checks the current state first, so a late timer or sample that
loses a race becomes a no-op.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from loguru import logger

from .accumulator import SessionAccumulator
from .classifier import PostureQuality
from .motion import AttitudeReading, MotionEvent, MotionSource, OrientationSample
from .scheduler import Scheduler, TimerHandle
from .session import PostureSession
from .store import SessionStore


class TrackingState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    ERROR = "error"


class TrackingError(Exception):
    """Invalid lifecycle request."""

    code = "tracking_error"


class SensorUnavailable(TrackingError):
    code = "sensor_unavailable"


class SensorFailure(TrackingError):
    code = "sensor_error"


@dataclass(frozen=True)
class LiveMetrics:
    """Read-model snapshot consumed by the UI."""

    state: TrackingState
    pitch: float
    roll: float
    yaw: float
    is_connected: bool
    connection_status: str
    posture_quality: PostureQuality
    quality_message: str
    recommendation: str
    pitch_history: List[float] = field(default_factory=list)
    poor_posture_duration: float = 0.0
    session_duration: float = 0.0
    poor_posture_percentage: int = 0
    started_at: Optional[datetime] = None
    last_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "pitch": self.pitch,
            "roll": self.roll,
            "yaw": self.yaw,
            "is_connected": self.is_connected,
            "connection_status": self.connection_status,
            "posture_quality": self.posture_quality.value,
            "quality_message": self.quality_message,
            "recommendation": self.recommendation,
            "pitch_history": list(self.pitch_history),
            "poor_posture_duration": self.poor_posture_duration,
            "session_duration": self.session_duration,
            "poor_posture_percentage": self.poor_posture_percentage,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "last_error": self.last_error,
        }


Listener = Callable[[LiveMetrics], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionLifecycleManager:
    def __init__(
        self,
        motion: MotionSource,
        store: SessionStore,
        scheduler: Scheduler,
        accumulator: Optional[SessionAccumulator] = None,
        clock: Callable[[], datetime] = _utcnow,
        tick_interval: float = 1.0,
        connect_timeout: float = 10.0,
    ) -> None:
        self.motion = motion
        self.store = store
        self.scheduler = scheduler
        self.accumulator = accumulator or SessionAccumulator()
        self.clock = clock
        self.tick_interval = tick_interval
        self.connect_timeout = connect_timeout

        self.state = TrackingState.IDLE
        self.is_connected = False
        self.connection_status = "Not Connected"
        self.last_error: Optional[str] = None
        self.last_session: Optional[PostureSession] = None

        self._subscription: Optional[int] = None
        self._tick_handle: Optional[TimerHandle] = None
        self._deadline_handle: Optional[TimerHandle] = None
        self._listeners: List[Listener] = []

    # -- read model -------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> LiveMetrics:
        acc = self.accumulator
        return LiveMetrics(
            state=self.state,
            pitch=acc.pitch,
            roll=acc.roll,
            yaw=acc.yaw,
            is_connected=self.is_connected,
            connection_status=self.connection_status,
            posture_quality=acc.quality,
            quality_message=acc.quality.message,
            recommendation=acc.quality.recommendation,
            pitch_history=acc.history(),
            poor_posture_duration=acc.poor_posture_duration,
            session_duration=acc.session_duration,
            poor_posture_percentage=acc.poor_posture_percentage,
            started_at=acc.start_time if self.state in (TrackingState.CONNECTING, TrackingState.ACTIVE) else None,
            last_error=self.last_error,
        )

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception as exc:
                logger.warning("Live metrics listener failed: {}", exc)

    # -- commands ---------------------------------------------------------

    def start_tracking(self) -> None:
        if self.state in (TrackingState.CONNECTING, TrackingState.ACTIVE):
            raise TrackingError(f"already {self.state.value}")
        if not self.motion.is_available():
            self.connection_status = "Motion sensor not available"
            self.last_error = SensorUnavailable.code
            logger.warning("Tracking start refused: motion sensor not available")
            self._notify()
            raise SensorUnavailable("motion sensor not available")

        now = self.clock()
        self.accumulator.start(now)
        self.last_error = None
        self.is_connected = False
        self.connection_status = "Connecting..."
        self.state = TrackingState.CONNECTING
        try:
            self._subscription = self.motion.subscribe(self._on_motion)
        except Exception as exc:
            self._on_motion_error(exc)
            raise SensorFailure(self.connection_status) from exc
        self._tick_handle = self.scheduler.call_every(self.tick_interval, self._on_tick)
        self._deadline_handle = self.scheduler.call_later(self.connect_timeout, self._on_connect_timeout)
        logger.info("Tracking started, waiting for first sample (timeout={}s)", self.connect_timeout)
        self._notify()

    def stop_tracking(self) -> Optional[PostureSession]:
        """Stop tracking; persist and return the session if one was active."""
        was_active = self.state is TrackingState.ACTIVE
        previous = self.state
        self._release()
        record: Optional[PostureSession] = None
        saved = True
        if was_active:
            record = self.accumulator.finalize(self.clock())
            self.last_session = record
            try:
                self.store.append(record)
                logger.info(
                    "Session stopped duration={:.1f}s poor={:.1f}s ({}%)",
                    record.total_duration,
                    record.poor_posture_duration,
                    record.poor_posture_percentage,
                )
            except Exception as exc:
                saved = False
                self.last_error = "storage_failure"
                logger.warning("Failed to persist posture session {}: {}", record.id, exc)
        else:
            logger.info("Tracking stopped from state={} without an active session", previous.value)
        self.state = TrackingState.IDLE
        self.is_connected = False
        self.connection_status = "Disconnected" if saved else "Failed to save session"
        self._notify()
        return record

    def retry(self) -> None:
        if self.state is not TrackingState.ERROR:
            raise TrackingError(f"cannot retry from {self.state.value}")
        self.state = TrackingState.IDLE
        self.start_tracking()

    def cancel(self) -> None:
        """Abandon a pending or failed connection without recording a session."""
        if self.state is TrackingState.ACTIVE:
            raise TrackingError("session is active, stop it instead")
        self._release()
        self.state = TrackingState.IDLE
        self.is_connected = False
        self.connection_status = "Not Connected"
        self._notify()

    # -- callbacks --------------------------------------------------------

    def _on_motion(self, event: MotionEvent) -> None:
        if self.state not in (TrackingState.CONNECTING, TrackingState.ACTIVE):
            return
        if isinstance(event, Exception):
            self._on_motion_error(event)
            return
        self._on_reading(event)

    def _on_reading(self, reading: AttitudeReading) -> None:
        now = self.clock()
        if self.state is TrackingState.CONNECTING:
            self._cancel_deadline()
            self.state = TrackingState.ACTIVE
            logger.info("Motion sensor connected")
        self.is_connected = True
        self.connection_status = "Connected"
        self.accumulator.ingest_sample(OrientationSample.from_attitude(reading, timestamp=now), now)
        self._notify()

    def _on_motion_error(self, error: Exception) -> None:
        message = str(error) or error.__class__.__name__
        self.is_connected = False
        self.connection_status = f"Error: {message}"
        self.last_error = message
        if self.state is TrackingState.CONNECTING:
            self._release()
            self.state = TrackingState.ERROR
            logger.warning("Motion sensor failed while connecting: {}", message)
        else:
            # Active sessions keep running; the next good sample reconnects
            logger.warning("Motion stream error during session: {}", message)
        self._notify()

    def _on_tick(self) -> None:
        if self.state not in (TrackingState.CONNECTING, TrackingState.ACTIVE):
            return
        self.accumulator.tick(self.clock())
        self._notify()

    def _on_connect_timeout(self) -> None:
        self._deadline_handle = None
        if self.state is not TrackingState.CONNECTING:
            return
        self._release()
        self.state = TrackingState.ERROR
        self.is_connected = False
        self.connection_status = "Connection timed out"
        self.last_error = "connection_timeout"
        logger.warning("No motion sample within {}s", self.connect_timeout)
        self._notify()

    # -- helpers ----------------------------------------------------------

    def _cancel_deadline(self) -> None:
        if self._deadline_handle is not None:
            self._deadline_handle.cancel()
            self._deadline_handle = None

    def _release(self) -> None:
        """Unsubscribe and cancel timers so no late callback touches the session."""
        if self._subscription is not None:
            self.motion.unsubscribe(self._subscription)
            self._subscription = None
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        self._cancel_deadline()
