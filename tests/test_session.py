from __future__ import annotations

import json

import pytest
from conftest import FakeClock, ManualScheduler, RecordingSurface, record

from sllive.config import LiveMapConfig
from sllive.ingestion.trips import StaticTripLookup
from sllive.models.geo import LatLng
from sllive.render import ArrowIcon, DotIcon
from sllive.session import LiveSession
from sllive.state.events import LabelEvent
from sllive.state.labels import PINNED_LABEL_MARKER_ID
from sllive.state.storage import MemoryStore


@pytest.fixture
def session(
    config: LiveMapConfig,
    surface: RecordingSurface,
    trips: StaticTripLookup,
    scheduler: ManualScheduler,
    clock: FakeClock,
) -> LiveSession:
    return LiveSession(config, surface=surface, trips=trips, store=MemoryStore(), scheduler=scheduler, clock=clock)


def _vehicle_markers(surface: RecordingSurface) -> set[str]:
    return {marker_id for marker_id in surface.markers if not marker_id.startswith("label:")}


def test_converges_to_latest_snapshot(session: LiveSession, surface: RecordingSurface) -> None:
    first = [
        record("a", "t14", 59.330, 18.070),
        record("b", "t17", 59.300, 18.100),
        record("c", "t4", 59.340, 18.050),
    ]
    report = session.apply_snapshot(first)
    assert (report.received, report.created, report.updated, report.evicted) == (3, 3, 0, 0)
    assert _vehicle_markers(surface) == {"a", "b", "c"}

    second = [
        record("b", "t17", 59.301, 18.101),
        record("d", "t43", 59.200, 17.900),
    ]
    report = session.apply_snapshot(second)
    assert (report.created, report.updated, report.evicted) == (1, 1, 2)
    assert _vehicle_markers(surface) == {"b", "d"}
    assert session.tracker.ids() == {"b", "d"}


def test_unknown_and_malformed_records_are_skipped(session: LiveSession, surface: RecordingSurface) -> None:
    report = session.apply_snapshot(
        [
            record("a", "t14", 59.330, 18.070),
            record("x", "no-such-trip", 59.330, 18.070),
            {"id": "y", "lat": "--", "lon": 18.0, "tripId": "t14"},
            {"lat": 59.0, "lon": 18.0, "tripId": "t14"},
            "garbage",
        ]
    )
    assert report.received == 5
    assert report.skipped == 4
    assert _vehicle_markers(surface) == {"a"}


def test_lines_are_normalized_and_collected(session: LiveSession) -> None:
    session.apply_snapshot([record("d", "t43", 59.2, 17.9), record("c", "t4", 59.3, 18.0)])
    track = session.tracker.get("d")
    assert track is not None
    assert track.vehicle.line == "43X"
    assert session.known_lines == {"43X", "4"}


def test_selection_filters_vehicles(session: LiveSession, surface: RecordingSurface) -> None:
    snapshot = [
        record("a", "t14", 59.330, 18.070),
        record("b", "t17", 59.300, 18.100),
        record("c", "t4", 59.340, 18.050),
        record("e", "t176", 59.350, 17.800),
    ]
    session.apply_snapshot(snapshot)
    assert _vehicle_markers(surface) == {"a", "b", "c", "e"}

    session.selection.set_from_search("14,4")
    report = session.apply_snapshot(snapshot)
    assert _vehicle_markers(surface) == {"a", "c"}
    assert report.hidden == 2
    assert report.evicted == 2

    session.selection.toggle_bus_token()
    session.apply_snapshot(snapshot)
    assert _vehicle_markers(surface) == {"a", "c", "e"}


def test_none_selection_evicts_everything(session: LiveSession, surface: RecordingSurface) -> None:
    session.apply_snapshot([record("a", "t14", 59.330, 18.070)])
    session.handle_label_event(LabelEvent.click("a"))

    session.selection.show_none()
    report = session.apply_snapshot([record("a", "t14", 59.330, 18.070)])
    assert report.evicted == 1
    assert surface.markers == {}
    assert len(session.tracker) == 0
    assert session.labels.pinned_id is None


def test_heading_appears_after_movement(session: LiveSession, surface: RecordingSurface) -> None:
    session.apply_snapshot([record("a", "t14", 59.330, 18.070, bearing=0)])
    assert isinstance(surface.icon_of("a"), DotIcon)

    session.apply_snapshot([record("a", "t14", 59.331, 18.073, bearing=0)])
    icon = surface.icon_of("a")
    assert isinstance(icon, ArrowIcon)
    assert icon.appear
    assert 45.0 < icon.bearing < 70.0

    session.apply_snapshot([record("a", "t14", 59.331, 18.073, bearing=0)])
    icon = surface.icon_of("a")
    assert isinstance(icon, ArrowIcon)
    assert not icon.appear
    assert 45.0 < icon.bearing < 70.0


def test_pinned_label_follows_animation(
    session: LiveSession, surface: RecordingSurface, scheduler: ManualScheduler
) -> None:
    session.apply_snapshot([record("a", "t14", 59.330, 18.070)])
    session.handle_label_event(LabelEvent.click("a"))

    session.apply_snapshot([record("a", "t14", 59.332, 18.074, speed=55)])
    scheduler.advance(0.1)
    assert surface.position_of(PINNED_LABEL_MARKER_ID) == surface.position_of("a")
    assert surface.position_of("a") != LatLng(59.332, 18.074)

    scheduler.run_until_idle()
    assert surface.position_of(PINNED_LABEL_MARKER_ID) == LatLng(59.332, 18.074)
    icon = surface.icon_of(PINNED_LABEL_MARKER_ID)
    assert icon.text == "14 → Mörby centrum • 55 km/h"  # type: ignore[union-attr]


def test_evicting_pinned_vehicle_removes_label(session: LiveSession, surface: RecordingSurface) -> None:
    session.apply_snapshot([record("a", "t14", 59.330, 18.070), record("b", "t17", 59.3, 18.1)])
    session.handle_label_event(LabelEvent.click("a"))
    session.handle_label_event(LabelEvent.pointer_enter("b"))

    session.apply_snapshot([record("b", "t17", 59.3, 18.1)])
    assert session.labels.pinned_id is None
    assert PINNED_LABEL_MARKER_ID not in surface.markers
    assert surface.removed.index(PINNED_LABEL_MARKER_ID) < surface.removed.index("a")
    assert session.labels.hover_id == "b"


@pytest.mark.parametrize(
    "bad",
    [
        '{"id": "a", "lat": 59.331, "lon": Infinity, "tripId": "t14"}',
        '{"id": "a", "lat": "inf", "lon": 18.073, "tripId": "t14"}',
    ],
)
def test_non_finite_coordinates_are_skipped(session: LiveSession, surface: RecordingSurface, bad: str) -> None:
    session.apply_snapshot([record("a", "t14", 59.330, 18.070)])

    payload = json.loads(f'[{bad}, {{"id": "b", "lat": 59.300, "lon": 18.100, "tripId": "t17"}}]')
    report = session.apply_snapshot(payload)

    assert report.skipped == 1
    assert session.tracker.ids() == {"b"}
    assert _vehicle_markers(surface) == {"b"}
