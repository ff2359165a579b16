"""Headphone motion sensor adapters (mock-first).

- ``MotionSource`` is the collaborator interface the lifecycle manager uses
- ``SimulatedMotionSource`` produces a drifting head attitude on the asyncio loop
- ``PushMotionSource`` relays readings posted by a companion device
"""
from __future__ import annotations

import asyncio
import itertools
import math
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Protocol, Union

from loguru import logger


@dataclass(frozen=True)
class AttitudeReading:
    """Raw attitude as reported by the sensor, in radians."""

    pitch: float
    roll: float
    yaw: float
    timestamp_utc: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class OrientationSample:
    pitch_degrees: float
    roll_degrees: float
    yaw_degrees: float
    timestamp: datetime

    @classmethod
    def from_attitude(cls, reading: AttitudeReading, timestamp: Optional[datetime] = None) -> "OrientationSample":
        return cls(
            pitch_degrees=math.degrees(reading.pitch),
            roll_degrees=math.degrees(reading.roll),
            yaw_degrees=math.degrees(reading.yaw),
            timestamp=timestamp or reading.timestamp_utc,
        )


MotionEvent = Union[AttitudeReading, Exception]
MotionCallback = Callable[[MotionEvent], None]


class MotionSource(Protocol):
    def is_available(self) -> bool: ...

    def subscribe(self, callback: MotionCallback) -> int: ...

    def unsubscribe(self, handle: int) -> None: ...


class MotionSourceError(RuntimeError):
    """Raised into subscriber callbacks when the sensor stream fails."""


class UnavailableMotionSource:
    """Sensor stand-in for hosts without motion hardware."""

    def is_available(self) -> bool:
        return False

    def subscribe(self, callback: MotionCallback) -> int:
        raise MotionSourceError("motion sensor not available")

    def unsubscribe(self, handle: int) -> None:
        return None


class PushMotionSource:
    """Fan out readings pushed over the API to the current subscribers.

    Callbacks run synchronously in the caller's context, which for the API is
    the event loop that also drives the session ticks.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[int, MotionCallback] = {}
        self._ids = itertools.count(1)

    def is_available(self) -> bool:
        return True

    def subscribe(self, callback: MotionCallback) -> int:
        handle = next(self._ids)
        self._subscribers[handle] = callback
        return handle

    def unsubscribe(self, handle: int) -> None:
        self._subscribers.pop(handle, None)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def push(self, reading: AttitudeReading) -> int:
        """Deliver ``reading`` and return how many subscribers received it."""
        return self._deliver(reading)

    def fail(self, error: Exception) -> int:
        return self._deliver(error)

    def _deliver(self, event: MotionEvent) -> int:
        # Copy: a callback may unsubscribe while we iterate
        callbacks = list(self._subscribers.values())
        for cb in callbacks:
            cb(event)
        return len(callbacks)


class SimulatedMotionSource:
    """Random-walk head attitude with occasional slouching episodes."""

    def __init__(
        self,
        sample_hz: float = 30.0,
        available: bool = True,
        seed: Optional[int] = None,
    ) -> None:
        self.sample_hz = max(1.0, float(sample_hz))
        self.available = available
        self._rng = random.Random(seed)
        self._tasks: Dict[int, asyncio.Task] = {}
        self._ids = itertools.count(1)
        self._pitch_deg = -8.0
        self._slouching = False

    def is_available(self) -> bool:
        return self.available

    def subscribe(self, callback: MotionCallback) -> int:
        if not self.available:
            raise MotionSourceError("motion sensor not available")
        handle = next(self._ids)
        loop = asyncio.get_running_loop()
        self._tasks[handle] = loop.create_task(self._run(callback), name=f"SimulatedMotion-{handle}")
        return handle

    def unsubscribe(self, handle: int) -> None:
        task = self._tasks.pop(handle, None)
        if task is not None:
            task.cancel()

    def next_reading(self) -> AttitudeReading:
        # Switch between upright and slouched targets every few seconds on average
        if self._rng.random() < 1.0 / (self.sample_hz * 8):
            self._slouching = not self._slouching
        target = -28.0 if self._slouching else -6.0
        self._pitch_deg += (target - self._pitch_deg) * 0.05 + self._rng.gauss(0.0, 0.6)
        roll_deg = self._rng.gauss(0.0, 2.0)
        yaw_deg = self._rng.gauss(0.0, 4.0)
        return AttitudeReading(
            pitch=math.radians(self._pitch_deg),
            roll=math.radians(roll_deg),
            yaw=math.radians(yaw_deg),
        )

    async def _run(self, callback: MotionCallback) -> None:
        dt = 1.0 / self.sample_hz
        try:
            while True:
                callback(self.next_reading())
                await asyncio.sleep(dt)
        except asyncio.CancelledError:
            logger.debug("Simulated motion stream cancelled")
            raise
