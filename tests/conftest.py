from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from sllive.config import LiveMapConfig
from sllive.ingestion.trips import StaticTripLookup
from sllive.models.geo import LatLng
from sllive.models.snapshot import EnrichedVehicle
from sllive.models.trip import TripInfo
from sllive.render import HeadlessSurface, MarkerIcon


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@dataclass
class _ManualHandle:
    callback: Any
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Frame scheduler driven by hand: frames fire only on :meth:`advance`."""

    clock: FakeClock
    pending: list[_ManualHandle] = field(default_factory=list)

    def schedule(self, callback: Any) -> _ManualHandle:
        handle = _ManualHandle(callback)
        self.pending.append(handle)
        return handle

    @property
    def armed(self) -> int:
        return sum(1 for handle in self.pending if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        self.clock.now += seconds
        due, self.pending = self.pending, []
        for handle in due:
            if not handle.cancelled:
                handle.callback(self.clock.now)

    def run_until_idle(self, step: float = 1 / 60, limit: int = 10_000) -> None:
        for _ in range(limit):
            if not self.armed:
                return
            self.advance(step)
        raise AssertionError("frames still pending")


class RecordingSurface(HeadlessSurface):
    """Headless surface that also remembers marker layering."""

    def __init__(self) -> None:
        super().__init__()
        self.z_indexes: dict[str, int] = {}
        self.interactive: dict[str, bool] = {}
        self.removed: list[str] = []

    def add_marker(
        self,
        marker_id: str,
        position: LatLng,
        icon: MarkerIcon,
        *,
        z_index: int = 0,
        interactive: bool = True,
    ) -> None:
        super().add_marker(marker_id, position, icon, z_index=z_index, interactive=interactive)
        self.z_indexes[marker_id] = z_index
        self.interactive[marker_id] = interactive

    def remove_marker(self, marker_id: str) -> None:
        super().remove_marker(marker_id)
        self.removed.append(marker_id)

    def position_of(self, marker_id: str) -> LatLng:
        return self.markers[marker_id][0]

    def icon_of(self, marker_id: str) -> MarkerIcon:
        return self.markers[marker_id][1]


def make_vehicle(
    vehicle_id: str = "v1",
    *,
    line: str = "14",
    lat: float = 59.330,
    lon: float = 18.070,
    bearing: float | None = None,
    type: int | None = 401,
    headsign: str | None = "Mörby centrum",
    speed_kmh: float | None = None,
) -> EnrichedVehicle:
    return EnrichedVehicle(
        id=vehicle_id,
        lat=lat,
        lon=lon,
        bearing=bearing,
        speed_kmh=speed_kmh,
        trip_id=f"trip-{vehicle_id}",
        line=line,
        headsign=headsign,
        type=type,
    )


def record(
    vehicle_id: str,
    trip_id: str,
    lat: float,
    lon: float,
    *,
    bearing: float | None = 0,
    speed: float | None = None,
) -> dict[str, Any]:
    """A snapshot record shaped like the live feed."""
    return {"id": vehicle_id, "lat": lat, "lon": lon, "bearing": bearing, "speedKmh": speed, "tripId": trip_id}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(100.0)


@pytest.fixture
def scheduler(clock: FakeClock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def config() -> LiveMapConfig:
    return LiveMapConfig()


@pytest.fixture
def trips() -> StaticTripLookup:
    return StaticTripLookup(
        {
            "t14": TripInfo(line="14", headsign="Mörby centrum", type=401),
            "t17": TripInfo(line="17", headsign="Skarpnäck", type=401),
            "t43": TripInfo(line="Line 43X ", headsign="Nynäshamn", type=109),
            "t4": TripInfo(line="4", headsign="Radiohuset", type=700),
            "t176": TripInfo(line="176", headsign="Stenhamra", type=700),
        }
    )
