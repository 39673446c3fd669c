"""Per-vehicle render state.

The tracker owns one :class:`VehicleTrackState` per vehicle currently on
the map, the marker that represents it, and its single in-flight
animation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from sllive._constants import MOVEMENT_EPSILON, VEHICLE_Z_INDEX
from sllive.models.geo import LatLng
from sllive.models.snapshot import EnrichedVehicle
from sllive.render import RenderSurface, vehicle_icon
from sllive.state.animation import Animation, Animator, pixel_distance
from sllive.state.heading import HeadingState, infer_heading

_logger = logging.getLogger(__name__)

FrameListener = Callable[[str, LatLng], None]


class UpsertOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass
class VehicleTrackState:
    """Render state of one tracked vehicle.

    ``position`` is where the marker is drawn right now (mid-glide during an
    animation); ``last_reported`` is the position from the latest snapshot
    and feeds heading inference on the next tick. ``visible`` turns false
    once the vehicle is evicted; frames still queued for it are then ignored.
    """

    vehicle_id: str
    vehicle: EnrichedVehicle
    position: LatLng
    last_reported: LatLng
    heading: HeadingState = field(default_factory=HeadingState)
    directional: bool = False
    visible: bool = True
    animation: Animation | None = None

    @property
    def bearing_established(self) -> bool:
        return self.heading.established

    @property
    def established_bearing(self) -> float | None:
        return self.heading.bearing


class VehicleTracker:
    """Creates, moves and removes vehicle markers on a render surface."""

    def __init__(
        self,
        surface: RenderSurface,
        animator: Animator,
        *,
        movement_epsilon: float = MOVEMENT_EPSILON,
        on_frame: FrameListener | None = None,
    ) -> None:
        self._surface = surface
        self._animator = animator
        self._movement_epsilon = movement_epsilon
        self._on_frame = on_frame
        self._tracks: dict[str, VehicleTrackState] = {}

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._tracks

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[VehicleTrackState]:
        return iter(list(self._tracks.values()))

    def ids(self) -> set[str]:
        return set(self._tracks)

    def get(self, vehicle_id: str) -> VehicleTrackState | None:
        return self._tracks.get(vehicle_id)

    def upsert(self, vehicle: EnrichedVehicle) -> UpsertOutcome:
        position = vehicle.position
        track = self._tracks.get(vehicle.id)

        result = infer_heading(
            reported=vehicle.bearing,
            previous=track.last_reported if track is not None else None,
            current=position,
            state=track.heading if track is not None else HeadingState(),
            epsilon=self._movement_epsilon,
        )
        directional = result.bearing is not None

        if track is None:
            self._surface.add_marker(
                vehicle.id,
                position,
                vehicle_icon(vehicle, result.bearing),
                z_index=VEHICLE_Z_INDEX,
            )
            self._tracks[vehicle.id] = VehicleTrackState(
                vehicle_id=vehicle.id,
                vehicle=vehicle,
                position=position,
                last_reported=position,
                heading=result.state,
                directional=directional,
            )
            return UpsertOutcome.CREATED

        appear = directional and not track.directional
        if appear:
            _logger.debug("Vehicle %s heading established at %.1f°", vehicle.id, result.bearing)

        track.vehicle = vehicle
        track.last_reported = position
        track.heading = result.state
        track.directional = directional
        self._surface.set_marker_icon(vehicle.id, vehicle_icon(vehicle, result.bearing, appear=appear))
        self._move(track, position)
        return UpsertOutcome.UPDATED

    def _move(self, track: VehicleTrackState, target: LatLng) -> None:
        if track.animation is not None:
            track.animation.cancel()
            track.animation = None

        start = track.position
        distance_px = pixel_distance(self._surface.project(start), self._surface.project(target))

        def _apply(position: LatLng) -> None:
            if not track.visible:
                return
            track.position = position
            self._surface.move_marker(track.vehicle_id, position)
            if self._on_frame is not None:
                self._on_frame(track.vehicle_id, position)

        track.animation = self._animator.animate(start, target, distance_px, _apply)

    def evict(self, vehicle_id: str) -> bool:
        track = self._tracks.pop(vehicle_id, None)
        if track is None:
            return False
        if track.animation is not None:
            track.animation.cancel()
            track.animation = None
        track.visible = False
        self._surface.remove_marker(vehicle_id)
        return True

    def evict_all(self) -> int:
        evicted = 0
        for vehicle_id in list(self._tracks):
            if self.evict(vehicle_id):
                evicted += 1
        return evicted

    def finish_animations(self) -> None:
        """Jump every gliding marker to its target."""
        for track in self._tracks.values():
            if track.animation is not None:
                track.animation.finish()
                track.animation = None
