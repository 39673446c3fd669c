"""Heading inference.

Decides, per vehicle and tick, which bearing (if any) the marker should
show. Precedence:

1. A reported bearing strictly greater than zero. Feeds report ``0`` when
   they have no data, so zero is never trusted.
2. The initial great-circle bearing from the previous reported position,
   when the vehicle moved more than ``epsilon`` degrees on either axis.
3. The last established bearing, frozen while the vehicle stands still.
4. Unknown.

Once a heading is established it stays established for as long as the
vehicle is tracked.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple

from sllive._constants import MOVEMENT_EPSILON
from sllive.models.geo import LatLng


@dataclass(frozen=True, slots=True)
class HeadingState:
    bearing: float | None = None
    established: bool = False


class HeadingResult(NamedTuple):
    bearing: float | None
    state: HeadingState
    established_now: bool


def bearing_between(start: LatLng, end: LatLng) -> float:
    """Initial great-circle bearing from *start* to *end*, in [0, 360)."""
    phi1 = math.radians(start.lat)
    phi2 = math.radians(end.lat)
    delta_lambda = math.radians(end.lon - start.lon)

    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)

    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def has_moved(previous: LatLng, current: LatLng, epsilon: float = MOVEMENT_EPSILON) -> bool:
    return abs(current.lat - previous.lat) > epsilon or abs(current.lon - previous.lon) > epsilon


def infer_heading(
    *,
    reported: float | None,
    previous: LatLng | None,
    current: LatLng,
    state: HeadingState,
    epsilon: float = MOVEMENT_EPSILON,
) -> HeadingResult:
    bearing: float | None = None

    if reported is not None and math.isfinite(reported) and reported > 0:
        bearing = reported % 360.0
    elif previous is not None and has_moved(previous, current, epsilon):
        bearing = bearing_between(previous, current)

    if bearing is not None:
        return HeadingResult(bearing, HeadingState(bearing=bearing, established=True), True)

    if state.established and state.bearing is not None:
        return HeadingResult(state.bearing, state, False)

    return HeadingResult(None, state, False)
