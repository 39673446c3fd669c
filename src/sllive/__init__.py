"""sllive - Async live map core for Stockholm public transport vehicles."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sllive")
except PackageNotFoundError:
    __version__ = "0+local"
from sllive.client import SlLiveClient
from sllive.config import LiveMapConfig
from sllive.exceptions import (
    SlLiveConfigError,
    SlLiveError,
    SlLiveLookupError,
    SlLiveStorageError,
    SlLiveTransportError,
)
from sllive.ingestion.trips import StaticTripLookup, TripLookup
from sllive.lines import MODE_DEFINITIONS, TransitMode, classify_mode, color_for_line, normalize_line
from sllive.models import (
    EnrichedVehicle,
    LatLng,
    RawSnapshot,
    SelectionKind,
    SelectionState,
    TripInfo,
    VehicleKind,
)
from sllive.render import ArrowIcon, DotIcon, HeadlessSurface, LabelIcon, RenderSurface
from sllive.session import LiveSession, TickReport
from sllive.state.events import LabelEvent, LabelEventKind
from sllive.state.labels import LabelPhase
from sllive.state.storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "__version__",
    "ArrowIcon",
    "DotIcon",
    "EnrichedVehicle",
    "HeadlessSurface",
    "JsonFileStore",
    "KeyValueStore",
    "LabelEvent",
    "LabelEventKind",
    "LabelIcon",
    "LabelPhase",
    "LatLng",
    "LiveMapConfig",
    "LiveSession",
    "MODE_DEFINITIONS",
    "MemoryStore",
    "RawSnapshot",
    "RenderSurface",
    "SelectionKind",
    "SelectionState",
    "SlLiveClient",
    "SlLiveConfigError",
    "SlLiveError",
    "SlLiveLookupError",
    "SlLiveStorageError",
    "SlLiveTransportError",
    "StaticTripLookup",
    "TickReport",
    "TransitMode",
    "TripInfo",
    "TripLookup",
    "VehicleKind",
    "classify_mode",
    "color_for_line",
    "normalize_line",
]
