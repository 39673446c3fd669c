"""Per-map session state and the reconciliation step of a poll tick."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sllive._frames import AsyncioFrameScheduler, Clock, FrameScheduler
from sllive.config import LiveMapConfig
from sllive.ingestion.snapshot import enrich, parse_record
from sllive.ingestion.trips import TripLookup
from sllive.models.geo import LatLng
from sllive.render import RenderSurface
from sllive.state.animation import Animator
from sllive.state.events import LabelEvent
from sllive.state.labels import LabelPhase, LabelStateMachine
from sllive.state.selection import SelectionModel
from sllive.state.storage import KeyValueStore
from sllive.state.tracks import UpsertOutcome, VehicleTracker

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TickReport:
    """What one reconciliation pass did."""

    received: int = 0
    skipped: int = 0
    hidden: int = 0
    created: int = 0
    updated: int = 0
    evicted: int = 0


class LiveSession:
    """Everything that survives between poll ticks for one map.

    Holds the selection, the vehicle tracker and the label state machine,
    and applies snapshots to them. All methods run on the event loop
    thread; none of them await.

    Parameters
    ----------
    config : LiveMapConfig
        Timing and epsilon settings.
    surface : RenderSurface
        Where vehicle and label markers are drawn.
    trips : TripLookup
        Resolves a record's trip to its line.
    store : KeyValueStore or None
        Backing store for the persisted selection.
    scheduler : FrameScheduler or None
        Animation frame source. Defaults to an asyncio-based scheduler.
    clock : callable
        Monotonic time source in seconds, shared with the scheduler.
    """

    def __init__(
        self,
        config: LiveMapConfig,
        *,
        surface: RenderSurface,
        trips: TripLookup,
        store: KeyValueStore | None = None,
        scheduler: FrameScheduler | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.config = config
        self.trips = trips
        self.selection = SelectionModel(store, key=config.selection_key)
        animator = Animator(
            scheduler or AsyncioFrameScheduler(frame_interval=config.frame_interval, clock=clock),
            clock,
            min_duration=config.animation_min_duration,
            max_duration=config.animation_max,
            seconds_per_pixel=config.animation_seconds_per_pixel,
            snap_epsilon=config.snap_epsilon,
        )
        self.tracker = VehicleTracker(
            surface,
            animator,
            movement_epsilon=config.movement_epsilon,
            on_frame=self._on_frame,
        )
        self.labels = LabelStateMachine(surface, self.tracker.get)
        self.known_lines: set[str] = set()

    def _on_frame(self, vehicle_id: str, position: LatLng) -> None:
        self.labels.follow(vehicle_id, position)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def apply_snapshot(self, records: Iterable[Any]) -> TickReport:
        """Synchronize tracked vehicles with one snapshot.

        Afterwards exactly the visible vehicles of *records* are tracked.
        """
        report = TickReport()

        if self.selection.state.is_none:
            report.evicted = self.evict_all()
            return report

        seen: set[str] = set()
        for raw in records:
            report.received += 1
            record = parse_record(raw)
            vehicle = enrich(record, self.trips) if record is not None else None
            if vehicle is None:
                report.skipped += 1
                continue

            self.known_lines.add(vehicle.line)

            if not self.selection.is_visible(vehicle):
                report.hidden += 1
                if self.evict(vehicle.id):
                    report.evicted += 1
                continue

            seen.add(vehicle.id)
            if self.tracker.upsert(vehicle) is UpsertOutcome.CREATED:
                report.created += 1
            else:
                report.updated += 1
            self.labels.refresh(vehicle)

        for vehicle_id in self.tracker.ids() - seen:
            if self.evict(vehicle_id):
                report.evicted += 1

        _logger.debug(
            "Tick: %d received, %d skipped, %d hidden, %d created, %d updated, %d evicted",
            report.received,
            report.skipped,
            report.hidden,
            report.created,
            report.updated,
            report.evicted,
        )
        return report

    def evict(self, vehicle_id: str) -> bool:
        # Labels go first so nothing points at a removed marker.
        self.labels.forget(vehicle_id)
        return self.tracker.evict(vehicle_id)

    def evict_all(self) -> int:
        self.labels.clear()
        return self.tracker.evict_all()

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def handle_label_event(self, event: LabelEvent) -> LabelPhase:
        return self.labels.handle(event)
