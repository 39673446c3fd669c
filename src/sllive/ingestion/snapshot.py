"""Snapshot ingestion: parse raw records and join them with trip data."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from sllive._transport import SnapshotTransport
from sllive.ingestion.trips import TripLookup
from sllive.lines import normalize_line
from sllive.models.snapshot import EnrichedVehicle, RawSnapshot

_logger = logging.getLogger(__name__)


def parse_record(raw: Any) -> RawSnapshot | None:
    """Parse one record; ``None`` when id or coordinates are missing or unusable."""
    if isinstance(raw, RawSnapshot):
        return raw
    if not isinstance(raw, dict):
        return None
    try:
        return RawSnapshot.model_validate(raw)
    except ValidationError:
        return None


def parse_records(payload: Iterable[Any]) -> list[RawSnapshot]:
    """Parse a snapshot payload, dropping malformed records."""
    records: list[RawSnapshot] = []
    skipped = 0
    for raw in payload:
        record = parse_record(raw)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        _logger.debug("Dropped %d malformed snapshot records", skipped)
    return records


def enrich(record: RawSnapshot, trips: TripLookup) -> EnrichedVehicle | None:
    """Attach line, headsign and vehicle type; ``None`` for unknown trips."""
    if not record.trip_id:
        return None
    info = trips.lookup(record.trip_id)
    if info is None:
        return None
    line = normalize_line(info.line)
    if not line:
        return None
    return EnrichedVehicle(
        **record.model_dump(),
        raw=record.raw,
        line=line,
        headsign=info.headsign,
        type=info.type,
    )


async def fetch_snapshot(transport: SnapshotTransport) -> list[dict[str, Any]]:
    """Fetch the current snapshot as a list of raw record dicts."""
    payload = await transport.fetch_snapshot()
    return [item for item in payload if isinstance(item, dict)]
