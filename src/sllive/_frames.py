"""Animation frame scheduling.

Animations never sleep; they ask a :class:`FrameScheduler` for the next
frame and receive the frame time through the callback. Tests drive frames
by hand with a fake scheduler and clock.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Protocol

FrameCallback = Callable[[float], None]
Clock = Callable[[], float]


class FrameHandle(Protocol):
    def cancel(self) -> None: ...


class FrameScheduler(Protocol):
    """Schedules a single callback for the next display frame."""

    def schedule(self, callback: FrameCallback) -> FrameHandle: ...


class AsyncioFrameScheduler:
    """Frame scheduler on top of ``loop.call_later``.

    Each call arms exactly one timer; the returned ``asyncio.TimerHandle``
    is the cancel token.
    """

    def __init__(
        self,
        *,
        frame_interval: float,
        clock: Clock = time.monotonic,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._frame_interval = frame_interval
        self._clock = clock
        self._loop = loop

    def schedule(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self._frame_interval, self._fire, callback)

    def _fire(self, callback: FrameCallback) -> None:
        callback(self._clock())
