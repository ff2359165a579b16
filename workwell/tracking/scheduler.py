"""Timer abstraction for session ticks and connection deadlines.

Callbacks run on the asyncio loop, the same serial context that delivers
sensor samples, so they never race the accumulator.
"""
from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


class _RepeatingHandle:
    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle: Optional[asyncio.TimerHandle] = None
        self._schedule()

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        # Re-arm first so a failing callback does not stop the cadence
        self._schedule()
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler:
    """Scheduler bound lazily to the running event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self._get_loop().call_later(max(0.0, delay), callback)

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        return _RepeatingHandle(self._get_loop(), interval, callback)
