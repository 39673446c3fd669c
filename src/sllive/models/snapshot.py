"""Vehicle snapshot models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from sllive._constants import BUS_VEHICLE_TYPE
from sllive.ingestion.normalize import normalize_timestamp_seconds, safe_float, safe_str
from sllive.models._base import SlBaseModel, SlEnum
from sllive.models.geo import LatLng


class VehicleKind(SlEnum):
    """GTFS extended route types seen in the trip table."""

    UNKNOWN = -1
    RAIL = 100
    SUBURBAN_RAIL = 109
    METRO = 401
    BUS = BUS_VEHICLE_TYPE
    TRAM = 900
    FERRY = 1000


class RawSnapshot(SlBaseModel):
    """One vehicle position as received from the snapshot endpoint.

    Parameters
    ----------
    id : str
        Vehicle identifier, stable across ticks.
    lat, lon : float
        Position in degrees. Non-finite values fail validation.
    bearing : float or None
        Reported heading in degrees. ``0`` is treated downstream as
        "no data", not as north.
    speed_kmh : float or None
        Reported speed.
    trip_id : str or None
        GTFS trip id used for line lookup.
    ts : float or None
        Position timestamp in epoch seconds.
    """

    id: str
    lat: float = Field(validation_alias=AliasChoices("lat", "latitude"), allow_inf_nan=False)
    lon: float = Field(validation_alias=AliasChoices("lon", "lng", "longitude"), allow_inf_nan=False)
    bearing: float | None = None
    speed_kmh: float | None = None
    trip_id: str | None = None
    ts: float | None = None

    @field_validator("id", "trip_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        text = safe_str(value)
        return text if text is not None else value

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def _coerce_coordinates(cls, value: Any) -> Any:
        parsed = safe_float(value)
        return parsed if parsed is not None else value

    @field_validator("bearing", "speed_kmh", mode="before")
    @classmethod
    def _coerce_optional_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("ts", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> float | None:
        return normalize_timestamp_seconds(value)

    @property
    def position(self) -> LatLng:
        return LatLng(self.lat, self.lon)


class EnrichedVehicle(RawSnapshot):
    """A snapshot joined with its trip's line information.

    ``line`` is always a canonical line code.
    """

    line: str
    headsign: str | None = None
    type: int | None = None

    @property
    def kind(self) -> VehicleKind:
        if self.type is None:
            return VehicleKind.UNKNOWN
        return VehicleKind(self.type)

    @property
    def is_bus(self) -> bool:
        return self.type == BUS_VEHICLE_TYPE
