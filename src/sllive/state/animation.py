"""Eased marker animation.

A marker glides from wherever it currently is to its newly reported
position. Duration grows linearly with on-screen distance and is clamped,
and the curve is an ease-in-out cubic over wall-clock time.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from sllive._frames import Clock, FrameHandle, FrameScheduler
from sllive.models.geo import LatLng

PositionCallback = Callable[[LatLng], None]


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - ((-2 * t + 2) ** 3) / 2


def compute_duration(
    distance_px: float,
    *,
    min_duration: float,
    max_duration: float,
    seconds_per_pixel: float,
) -> float:
    """Glide duration in seconds for a move of *distance_px* screen pixels."""
    return max(min_duration, min(max_duration, distance_px * seconds_per_pixel))


def pixel_distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


class Animation:
    """One in-flight glide. Owns at most one pending frame handle."""

    def __init__(
        self,
        *,
        start: LatLng,
        end: LatLng,
        started_at: float,
        duration: float,
        on_frame: PositionCallback,
        scheduler: FrameScheduler,
    ) -> None:
        self.start = start
        self.end = end
        self.started_at = started_at
        self.duration = duration
        self._on_frame = on_frame
        self._scheduler = scheduler
        self._handle: FrameHandle | None = None
        self.done = False

    @property
    def active(self) -> bool:
        return not self.done

    def position_at(self, now: float) -> LatLng:
        if self.duration <= 0:
            return self.end
        t = max(0.0, (now - self.started_at) / self.duration)
        if t >= 1.0:
            return self.end
        return self.start.lerp(self.end, ease_in_out_cubic(t))

    def begin(self) -> None:
        self._handle = self._scheduler.schedule(self._step)

    def _step(self, now: float) -> None:
        self._handle = None
        if self.done:
            return
        self._on_frame(self.position_at(now))
        if now - self.started_at < self.duration:
            self._handle = self._scheduler.schedule(self._step)
        else:
            self.done = True

    def cancel(self) -> None:
        """Stop without moving the marker further."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.done = True

    def finish(self) -> None:
        """Stop and jump straight to the end position."""
        if self.done:
            return
        self.cancel()
        self._on_frame(self.end)


class Animator:
    """Creates animations with the configured timing bounds."""

    def __init__(
        self,
        scheduler: FrameScheduler,
        clock: Clock,
        *,
        min_duration: float,
        max_duration: float,
        seconds_per_pixel: float,
        snap_epsilon: float,
    ) -> None:
        self._scheduler = scheduler
        self._clock = clock
        self.min_duration = min_duration
        self.max_duration = max_duration
        self.seconds_per_pixel = seconds_per_pixel
        self.snap_epsilon = snap_epsilon

    def duration_for(self, distance_px: float) -> float:
        return compute_duration(
            distance_px,
            min_duration=self.min_duration,
            max_duration=self.max_duration,
            seconds_per_pixel=self.seconds_per_pixel,
        )

    def animate(
        self,
        start: LatLng,
        end: LatLng,
        distance_px: float,
        on_frame: PositionCallback,
    ) -> Animation | None:
        """Start a glide; ``None`` when the move is applied immediately."""
        if start.within(end, self.snap_epsilon):
            on_frame(end)
            return None

        animation = Animation(
            start=start,
            end=end,
            started_at=self._clock(),
            duration=self.duration_for(distance_px),
            on_frame=on_frame,
            scheduler=self._scheduler,
        )
        animation.begin()
        return animation
