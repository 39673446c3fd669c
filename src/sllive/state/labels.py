"""Hover and pinned vehicle labels.

At most one hover label and one pinned label exist at any time, each
attached to a different vehicle. Hovering never disturbs a pin; clicking a
vehicle toggles its pin; clicking the map background clears both.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from sllive._constants import HOVER_LABEL_Z_INDEX, PINNED_LABEL_Z_INDEX
from sllive.models.geo import LatLng
from sllive.models.snapshot import EnrichedVehicle
from sllive.render import RenderSurface, label_icon
from sllive.state.events import LabelEvent, LabelEventKind
from sllive.state.tracks import VehicleTrackState

_logger = logging.getLogger(__name__)

HOVER_LABEL_MARKER_ID = "label:hover"
PINNED_LABEL_MARKER_ID = "label:pinned"

TrackGetter = Callable[[str], VehicleTrackState | None]


class LabelPhase(StrEnum):
    IDLE = "idle"
    HOVERING = "hovering"
    PINNED = "pinned"
    BOTH = "both"


class LabelStateMachine:
    """Singleton label state for one map.

    Parameters
    ----------
    surface : RenderSurface
        Where label markers are drawn.
    tracks : callable
        Returns the current track for a vehicle id, or ``None`` when the
        vehicle is not on the map. Labels are placed at the track's current
        (possibly mid-animation) position.
    """

    def __init__(self, surface: RenderSurface, tracks: TrackGetter) -> None:
        self._surface = surface
        self._tracks = tracks
        self.hover_id: str | None = None
        self.hover_ref: str | None = None
        self.pinned_id: str | None = None
        self.pinned_ref: str | None = None
        self.pointer_over = False
        self._transitions: dict[LabelEventKind, Callable[[LabelEvent], None]] = {
            LabelEventKind.POINTER_ENTER: lambda e: self.pointer_enter(e.vehicle_id or ""),
            LabelEventKind.POINTER_LEAVE: lambda e: self.pointer_leave(e.vehicle_id or ""),
            LabelEventKind.CLICK: lambda e: self.click(e.vehicle_id or ""),
            LabelEventKind.BACKGROUND_CLICK: lambda _e: self.background_click(),
            LabelEventKind.POINTER_MOVE: lambda _e: self.pointer_move(),
        }

    @property
    def phase(self) -> LabelPhase:
        if self.hover_id is not None and self.pinned_id is not None:
            return LabelPhase.BOTH
        if self.pinned_id is not None:
            return LabelPhase.PINNED
        if self.hover_id is not None:
            return LabelPhase.HOVERING
        return LabelPhase.IDLE

    def handle(self, event: LabelEvent) -> LabelPhase:
        self._transitions[event.kind](event)
        return self.phase

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def pointer_enter(self, vehicle_id: str) -> None:
        self.pointer_over = True
        if self.pinned_id == vehicle_id:
            return
        track = self._tracks(vehicle_id)
        if track is None:
            return

        if self.hover_id is not None and self.hover_id != vehicle_id:
            self._remove_hover()

        icon = label_icon(track.vehicle, pinned=False)
        if self.hover_ref is None:
            self._surface.add_marker(
                HOVER_LABEL_MARKER_ID,
                track.position,
                icon,
                z_index=HOVER_LABEL_Z_INDEX,
                interactive=False,
            )
            self.hover_ref = HOVER_LABEL_MARKER_ID
        else:
            self._surface.move_marker(self.hover_ref, track.position)
            self._surface.set_marker_icon(self.hover_ref, icon)
        self.hover_id = vehicle_id

    def pointer_leave(self, vehicle_id: str) -> None:
        self.pointer_over = False
        self._hide_hover(vehicle_id)

    def click(self, vehicle_id: str) -> None:
        self._remove_hover()
        self.pointer_over = False

        if self.pinned_id == vehicle_id:
            self._remove_pin()
            return

        track = self._tracks(vehicle_id)
        self._remove_pin()
        if track is None:
            return

        self._surface.add_marker(
            PINNED_LABEL_MARKER_ID,
            track.position,
            label_icon(track.vehicle, pinned=True),
            z_index=PINNED_LABEL_Z_INDEX,
            interactive=False,
        )
        self.pinned_id = vehicle_id
        self.pinned_ref = PINNED_LABEL_MARKER_ID
        _logger.debug("Pinned label on vehicle %s", vehicle_id)

    def background_click(self) -> None:
        self._remove_pin()
        self._remove_hover()
        self.pointer_over = False

    def pointer_move(self) -> None:
        # Fallback for leave events the host never delivered.
        if not self.pointer_over and self.hover_id is not None and self.hover_id != self.pinned_id:
            self._hide_hover(self.hover_id)

    # ------------------------------------------------------------------
    # Coupling with the vehicle tracker
    # ------------------------------------------------------------------

    def follow(self, vehicle_id: str, position: LatLng) -> None:
        """Move labels attached to *vehicle_id* along with its marker."""
        if self.hover_id == vehicle_id and self.hover_ref is not None and self.pinned_id != vehicle_id:
            self._surface.move_marker(self.hover_ref, position)
        if self.pinned_id == vehicle_id and self.pinned_ref is not None:
            self._surface.move_marker(self.pinned_ref, position)

    def refresh(self, vehicle: EnrichedVehicle) -> None:
        """Redraw label content after a new snapshot for *vehicle*."""
        if self.pinned_id == vehicle.id and self.pinned_ref is not None:
            self._surface.set_marker_icon(self.pinned_ref, label_icon(vehicle, pinned=True))
        if self.hover_id == vehicle.id and self.hover_ref is not None and self.pinned_id != vehicle.id:
            self._surface.set_marker_icon(self.hover_ref, label_icon(vehicle, pinned=False))

    def forget(self, vehicle_id: str) -> None:
        """Drop any label referencing a vehicle that is leaving the map."""
        if self.hover_id == vehicle_id:
            self._remove_hover()
        if self.pinned_id == vehicle_id:
            self._remove_pin()

    def clear(self) -> None:
        self._remove_hover()
        self._remove_pin()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _hide_hover(self, vehicle_id: str) -> None:
        if self.hover_id != vehicle_id or self.pinned_id == vehicle_id:
            return
        self._remove_hover()

    def _remove_hover(self) -> None:
        if self.hover_ref is not None:
            self._surface.remove_marker(self.hover_ref)
        self.hover_ref = None
        self.hover_id = None

    def _remove_pin(self) -> None:
        if self.pinned_ref is not None:
            self._surface.remove_marker(self.pinned_ref)
        self.pinned_ref = None
        self.pinned_id = None
