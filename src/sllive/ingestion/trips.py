"""Trip → line lookup.

The table itself is maintained outside this package; this module only
defines the lookup interface and a mapping-backed implementation.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from sllive.exceptions import SlLiveLookupError
from sllive.models.trip import TripInfo

_logger = logging.getLogger(__name__)


class TripLookup(Protocol):
    """Synchronous ``trip_id → TripInfo`` mapping."""

    def lookup(self, trip_id: str) -> TripInfo | None: ...


class StaticTripLookup:
    """Lookup backed by an in-memory mapping."""

    def __init__(self, trips: Mapping[str, TripInfo]) -> None:
        self._trips: dict[str, TripInfo] = dict(trips)

    def __len__(self) -> int:
        return len(self._trips)

    def lookup(self, trip_id: str) -> TripInfo | None:
        return self._trips.get(trip_id)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> StaticTripLookup:
        """Parse ``{tripId: {line, headsign, type}}``, skipping bad entries."""
        trips: dict[str, TripInfo] = {}
        skipped = 0
        for trip_id, entry in raw.items():
            try:
                trips[str(trip_id)] = TripInfo.model_validate(entry)
            except ValidationError:
                skipped += 1
        if skipped:
            _logger.debug("Skipped %d malformed trip entries", skipped)
        return cls(trips)

    @classmethod
    def from_json_file(cls, path: str | Path) -> StaticTripLookup:
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SlLiveLookupError(f"Could not load trip table from {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise SlLiveLookupError(f"Trip table {path} must be a JSON object")
        return cls.from_mapping(raw)
