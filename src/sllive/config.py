"""Client configuration for sllive."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from sllive._constants import (
    ANIMATION_MAX_CEILING,
    ANIMATION_MAX_POLL_FRACTION,
    ANIMATION_MIN_DURATION,
    ANIMATION_SECONDS_PER_PIXEL,
    API_URL,
    FRAME_INTERVAL,
    MOVEMENT_EPSILON,
    POLL_INTERVAL,
    SELECTION_STORAGE_KEY,
    SNAP_EPSILON,
)
from sllive.exceptions import SlLiveConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise SlLiveConfigError(f"{key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class LiveMapConfig:
    """Live map configuration.

    Parameters
    ----------
    api_url : str
        Snapshot endpoint returning a JSON array of vehicle positions.
    poll_interval : float
        Seconds between poll ticks.
    animation_min_duration : float
        Shortest marker glide in seconds, so tiny moves do not snap.
    animation_max_duration : float or None
        Longest marker glide in seconds. ``None`` derives it from the poll
        interval (``min(poll_interval * 0.85, 2.5)``) so an animation always
        completes before the next tick.
    animation_seconds_per_pixel : float
        Glide time per on-screen pixel of displacement.
    frame_interval : float
        Seconds between animation frames.
    movement_epsilon : float
        Per-axis displacement in degrees above which a vehicle counts as
        moving for heading inference.
    snap_epsilon : float
        Per-axis displacement in degrees below which a move is applied
        without animation.
    request_timeout : float
        Total HTTP timeout per snapshot request, in seconds.
    selection_key : str
        Key under which the line selection is persisted.
    state_path : str or None
        JSON file backing the persisted selection. ``None`` keeps the
        selection in memory only.
    discard_stale_responses : bool
        Drop snapshot responses that resolve after a newer one was applied.
    """

    api_url: str = API_URL
    poll_interval: float = POLL_INTERVAL
    animation_min_duration: float = ANIMATION_MIN_DURATION
    animation_max_duration: float | None = None
    animation_seconds_per_pixel: float = ANIMATION_SECONDS_PER_PIXEL
    frame_interval: float = FRAME_INTERVAL
    movement_epsilon: float = MOVEMENT_EPSILON
    snap_epsilon: float = SNAP_EPSILON
    request_timeout: float = 10.0
    selection_key: str = SELECTION_STORAGE_KEY
    state_path: str | None = None
    discard_stale_responses: bool = True

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise SlLiveConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.animation_min_duration < 0:
            raise SlLiveConfigError(f"animation_min_duration must not be negative, got {self.animation_min_duration}")
        if self.frame_interval <= 0:
            raise SlLiveConfigError(f"frame_interval must be positive, got {self.frame_interval}")
        if self.animation_max < self.animation_min_duration:
            raise SlLiveConfigError(
                f"animation max duration {self.animation_max} is below the minimum {self.animation_min_duration}"
            )

    @property
    def animation_max(self) -> float:
        """Effective upper bound for a marker animation, in seconds."""
        if self.animation_max_duration is not None:
            return self.animation_max_duration
        return min(self.poll_interval * ANIMATION_MAX_POLL_FRACTION, ANIMATION_MAX_CEILING)

    @classmethod
    def from_env(cls, **overrides: Any) -> LiveMapConfig:
        """Create configuration from environment variables.

        Reads optional ``SLLIVE_*`` variables. Explicit keyword arguments
        override environment values.

        Raises
        ------
        SlLiveConfigError
            When a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        for env_key, field_name in {
            "SLLIVE_API_URL": "api_url",
            "SLLIVE_STATE_PATH": "state_path",
            "SLLIVE_SELECTION_KEY": "selection_key",
        }.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, field_name in {
            "SLLIVE_POLL_INTERVAL": "poll_interval",
            "SLLIVE_ANIMATION_MIN": "animation_min_duration",
            "SLLIVE_ANIMATION_MAX": "animation_max_duration",
            "SLLIVE_MOVEMENT_EPSILON": "movement_epsilon",
            "SLLIVE_REQUEST_TIMEOUT": "request_timeout",
        }.items():
            parsed = _env_float(env, env_key)
            if parsed is not None:
                config_kwargs[field_name] = parsed

        if "discard_stale_responses" not in overrides:
            config_kwargs["discard_stale_responses"] = _env_bool(env.get("SLLIVE_DISCARD_STALE"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
