"""Render surface interface and marker icon descriptors.

The map itself (tiles, projection, DOM) lives outside this package. The
core hands the surface plain frozen icon descriptors and positions; how
they are drawn is up to the surface.
"""

from __future__ import annotations

import logging
import math
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from sllive.lines import BUS_COLOR, color_for_line, darken_hex
from sllive.models.geo import LatLng
from sllive.models.snapshot import EnrichedVehicle

_logger = logging.getLogger(__name__)

# The arrow glyph points west at rotation 0.
_ARROW_ROTATION_OFFSET = 90.0


class DotIcon(BaseModel):
    """Undirected marker, used while a vehicle's heading is unknown."""

    model_config = ConfigDict(frozen=True)

    fill: str
    stroke: str
    size: int = 16


class ArrowIcon(BaseModel):
    """Directional marker rotated to the vehicle's bearing.

    ``appear`` is a one-shot cue set on the first frame a vehicle gains a
    heading; the next icon update clears it.
    """

    model_config = ConfigDict(frozen=True)

    fill: str
    stroke: str
    bearing: float
    size: int = 34
    appear: bool = False

    @property
    def rotation(self) -> float:
        return (self.bearing + _ARROW_ROTATION_OFFSET) % 360.0


class LabelIcon(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    background: str
    pinned: bool = False


MarkerIcon = DotIcon | ArrowIcon | LabelIcon


class RenderSurface(Protocol):
    """Map collaborator the core draws on."""

    def project(self, position: LatLng) -> tuple[float, float]:
        """Geographic position → screen pixels at the current zoom."""
        ...

    def add_marker(
        self,
        marker_id: str,
        position: LatLng,
        icon: MarkerIcon,
        *,
        z_index: int = 0,
        interactive: bool = True,
    ) -> None: ...

    def move_marker(self, marker_id: str, position: LatLng) -> None: ...

    def set_marker_icon(self, marker_id: str, icon: MarkerIcon) -> None: ...

    def remove_marker(self, marker_id: str) -> None: ...


def vehicle_icon(vehicle: EnrichedVehicle, bearing: float | None, *, appear: bool = False) -> DotIcon | ArrowIcon:
    """Marker for a vehicle: a dot without heading, an arrow with one."""
    if vehicle.is_bus:
        fill, stroke, arrow_size, dot_size = "#FFFFFF", BUS_COLOR, 22, 14
    else:
        fill = color_for_line(vehicle.line)
        stroke, arrow_size, dot_size = darken_hex(fill, 0.5), 34, 16
    if bearing is None:
        return DotIcon(fill=fill, stroke=stroke, size=dot_size)
    return ArrowIcon(fill=fill, stroke=stroke, bearing=bearing, size=arrow_size, appear=appear)


def format_speed(speed_kmh: float | None) -> str:
    if speed_kmh is None or math.isnan(speed_kmh) or speed_kmh < 0:
        return ""
    return f" • {math.floor(speed_kmh + 0.5)} km/h"


def label_text(vehicle: EnrichedVehicle) -> str:
    text = f"{vehicle.line} → {vehicle.headsign}" if vehicle.headsign else vehicle.line
    return f"{text}{format_speed(vehicle.speed_kmh)}"


def label_icon(vehicle: EnrichedVehicle, *, pinned: bool) -> LabelIcon:
    background = BUS_COLOR if vehicle.is_bus else color_for_line(vehicle.line)
    return LabelIcon(text=label_text(vehicle), background=background, pinned=pinned)


class HeadlessSurface:
    """Surface without a map: keeps markers in a dict and logs changes.

    Projection is spherical Web Mercator at a fixed zoom, which is all the
    animation timing needs.
    """

    def __init__(self, *, zoom: int = 12, tile_size: int = 256) -> None:
        self._scale = tile_size * (2**zoom)
        self.markers: dict[str, tuple[LatLng, MarkerIcon]] = {}

    def project(self, position: LatLng) -> tuple[float, float]:
        lat = max(min(position.lat, 85.05112878), -85.05112878)
        x = (position.lon + 180.0) / 360.0 * self._scale
        sin_lat = math.sin(math.radians(lat))
        y = (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)) * self._scale
        return x, y

    def add_marker(
        self,
        marker_id: str,
        position: LatLng,
        icon: MarkerIcon,
        *,
        z_index: int = 0,
        interactive: bool = True,
    ) -> None:
        _logger.debug("add %s at %.5f,%.5f (%s)", marker_id, position.lat, position.lon, type(icon).__name__)
        self.markers[marker_id] = (position, icon)

    def move_marker(self, marker_id: str, position: LatLng) -> None:
        entry = self.markers.get(marker_id)
        if entry is not None:
            self.markers[marker_id] = (position, entry[1])

    def set_marker_icon(self, marker_id: str, icon: MarkerIcon) -> None:
        entry = self.markers.get(marker_id)
        if entry is not None:
            self.markers[marker_id] = (entry[0], icon)

    def remove_marker(self, marker_id: str) -> None:
        if self.markers.pop(marker_id, None) is not None:
            _logger.debug("remove %s", marker_id)
