"""Geographic primitives."""

from __future__ import annotations

from typing import NamedTuple


class LatLng(NamedTuple):
    """A WGS84 point in degrees."""

    lat: float
    lon: float

    def lerp(self, other: LatLng, fraction: float) -> LatLng:
        """Linear interpolation of latitude and longitude towards *other*."""
        return LatLng(
            self.lat + (other.lat - self.lat) * fraction,
            self.lon + (other.lon - self.lon) * fraction,
        )

    def within(self, other: LatLng, epsilon: float) -> bool:
        """Whether both axes differ from *other* by less than *epsilon* degrees."""
        return abs(self.lat - other.lat) < epsilon and abs(self.lon - other.lon) < epsilon
