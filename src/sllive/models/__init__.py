"""Data models for snapshot records, trips and selections."""

from sllive.models._base import SlBaseModel, SlEnum
from sllive.models.geo import LatLng
from sllive.models.selection import SelectionKind, SelectionState
from sllive.models.snapshot import EnrichedVehicle, RawSnapshot, VehicleKind
from sllive.models.trip import TripInfo

__all__ = [
    "EnrichedVehicle",
    "LatLng",
    "RawSnapshot",
    "SelectionKind",
    "SelectionState",
    "SlBaseModel",
    "SlEnum",
    "TripInfo",
    "VehicleKind",
]
