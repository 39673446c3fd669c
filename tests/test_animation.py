from __future__ import annotations

import pytest
from conftest import FakeClock, ManualScheduler, RecordingSurface, make_vehicle

from sllive.models.geo import LatLng
from sllive.render import ArrowIcon, DotIcon
from sllive.state.animation import Animator, compute_duration, ease_in_out_cubic
from sllive.state.tracks import UpsertOutcome, VehicleTracker

START = LatLng(59.330, 18.070)
END = LatLng(59.332, 18.074)


def _animator(scheduler: ManualScheduler, clock: FakeClock) -> Animator:
    return Animator(
        scheduler,
        clock,
        min_duration=0.35,
        max_duration=2.5,
        seconds_per_pixel=0.007,
        snap_epsilon=1e-8,
    )


@pytest.mark.parametrize(
    ("t", "expected"),
    [(0.0, 0.0), (0.25, 0.0625), (0.5, 0.5), (0.75, 0.9375), (1.0, 1.0)],
)
def test_ease_in_out_cubic(t: float, expected: float) -> None:
    assert ease_in_out_cubic(t) == pytest.approx(expected)


def test_duration_is_monotonic_and_clamped() -> None:
    durations = [
        compute_duration(px, min_duration=0.35, max_duration=2.5, seconds_per_pixel=0.007)
        for px in (0, 10, 50, 100, 200, 357, 1000, 10_000)
    ]
    assert durations == sorted(durations)
    assert durations[0] == 0.35
    assert durations[3] == pytest.approx(0.7)
    assert durations[-1] == 2.5


class TestAnimator:
    def test_glide_follows_easing(self, scheduler: ManualScheduler, clock: FakeClock) -> None:
        frames: list[LatLng] = []
        animation = _animator(scheduler, clock).animate(START, END, 100.0, frames.append)
        assert animation is not None
        assert animation.duration == pytest.approx(0.7)

        scheduler.advance(0.35)
        mid = START.lerp(END, 0.5)
        assert frames[-1].lat == pytest.approx(mid.lat)
        assert frames[-1].lon == pytest.approx(mid.lon)
        assert animation.active

        scheduler.advance(0.4)
        assert frames[-1] == END
        assert not animation.active
        assert scheduler.armed == 0

    def test_snap_when_already_there(self, scheduler: ManualScheduler, clock: FakeClock) -> None:
        frames: list[LatLng] = []
        assert _animator(scheduler, clock).animate(END, END, 0.0, frames.append) is None
        assert frames == [END]
        assert scheduler.armed == 0

    def test_cancel_stops_frames(self, scheduler: ManualScheduler, clock: FakeClock) -> None:
        frames: list[LatLng] = []
        animation = _animator(scheduler, clock).animate(START, END, 100.0, frames.append)
        assert animation is not None
        animation.cancel()
        scheduler.advance(1.0)
        assert frames == []
        assert scheduler.armed == 0

    def test_finish_jumps_to_end(self, scheduler: ManualScheduler, clock: FakeClock) -> None:
        frames: list[LatLng] = []
        animation = _animator(scheduler, clock).animate(START, END, 100.0, frames.append)
        assert animation is not None
        animation.finish()
        assert frames == [END]
        animation.finish()
        assert frames == [END]


class TestTracker:
    def _tracker(
        self, surface: RecordingSurface, scheduler: ManualScheduler, clock: FakeClock
    ) -> VehicleTracker:
        return VehicleTracker(surface, _animator(scheduler, clock), movement_epsilon=2e-5)

    def test_new_vehicle_is_placed_without_animation(
        self, surface: RecordingSurface, scheduler: ManualScheduler, clock: FakeClock
    ) -> None:
        tracker = self._tracker(surface, scheduler, clock)
        assert tracker.upsert(make_vehicle(lat=START.lat, lon=START.lon)) is UpsertOutcome.CREATED
        assert surface.position_of("v1") == START
        assert surface.z_indexes["v1"] == 500
        assert isinstance(surface.icon_of("v1"), DotIcon)
        assert scheduler.armed == 0

    def test_update_glides_to_new_position(
        self, surface: RecordingSurface, scheduler: ManualScheduler, clock: FakeClock
    ) -> None:
        tracker = self._tracker(surface, scheduler, clock)
        tracker.upsert(make_vehicle(lat=START.lat, lon=START.lon))
        assert tracker.upsert(make_vehicle(lat=END.lat, lon=END.lon)) is UpsertOutcome.UPDATED

        track = tracker.get("v1")
        assert track is not None
        assert track.animation is not None
        assert track.last_reported == END
        scheduler.run_until_idle()
        assert surface.position_of("v1") == END
        assert track.position == END

    def test_restart_begins_at_interpolated_position(
        self, surface: RecordingSurface, scheduler: ManualScheduler, clock: FakeClock
    ) -> None:
        tracker = self._tracker(surface, scheduler, clock)
        tracker.upsert(make_vehicle(lat=START.lat, lon=START.lon))
        tracker.upsert(make_vehicle(lat=END.lat, lon=END.lon))
        scheduler.advance(0.1)

        track = tracker.get("v1")
        assert track is not None
        mid = track.position
        assert mid not in (START, END)

        target = LatLng(59.335, 18.080)
        tracker.upsert(make_vehicle(lat=target.lat, lon=target.lon))
        assert track.animation is not None
        assert track.animation.start == mid
        assert scheduler.armed == 1

        scheduler.run_until_idle()
        assert surface.position_of("v1") == target

    def test_heading_appears_with_cue_once(
        self, surface: RecordingSurface, scheduler: ManualScheduler, clock: FakeClock
    ) -> None:
        tracker = self._tracker(surface, scheduler, clock)
        tracker.upsert(make_vehicle(lat=START.lat, lon=START.lon, bearing=0))
        assert isinstance(surface.icon_of("v1"), DotIcon)

        tracker.upsert(make_vehicle(lat=END.lat, lon=END.lon, bearing=0))
        icon = surface.icon_of("v1")
        assert isinstance(icon, ArrowIcon)
        assert icon.appear

        tracker.upsert(make_vehicle(lat=END.lat, lon=END.lon, bearing=0))
        icon = surface.icon_of("v1")
        assert isinstance(icon, ArrowIcon)
        assert not icon.appear

    def test_evict_cancels_animation(
        self, surface: RecordingSurface, scheduler: ManualScheduler, clock: FakeClock
    ) -> None:
        tracker = self._tracker(surface, scheduler, clock)
        tracker.upsert(make_vehicle(lat=START.lat, lon=START.lon))
        tracker.upsert(make_vehicle(lat=END.lat, lon=END.lon))
        assert tracker.evict("v1")
        assert not tracker.evict("v1")
        assert "v1" not in surface.markers
        assert scheduler.armed == 0
        scheduler.advance(1.0)
        assert "v1" not in surface.markers

    def test_finish_animations(
        self, surface: RecordingSurface, scheduler: ManualScheduler, clock: FakeClock
    ) -> None:
        tracker = self._tracker(surface, scheduler, clock)
        tracker.upsert(make_vehicle(lat=START.lat, lon=START.lon))
        tracker.upsert(make_vehicle(lat=END.lat, lon=END.lon))
        tracker.finish_animations()
        assert surface.position_of("v1") == END
        assert scheduler.armed == 0

    def test_frames_after_eviction_are_ignored(
        self, surface: RecordingSurface, scheduler: ManualScheduler, clock: FakeClock
    ) -> None:
        followed: list[str] = []
        tracker = VehicleTracker(
            surface,
            _animator(scheduler, clock),
            movement_epsilon=2e-5,
            on_frame=lambda vehicle_id, _position: followed.append(vehicle_id),
        )
        tracker.upsert(make_vehicle(lat=START.lat, lon=START.lon))
        tracker.upsert(make_vehicle(lat=END.lat, lon=END.lon))
        track = tracker.get("v1")
        assert track is not None
        assert track.visible
        animation = track.animation
        assert animation is not None

        tracker.evict("v1")
        assert not track.visible

        # A frame delivered after the marker is gone.
        animation._on_frame(END)
        assert followed == []
        assert track.position == START
        assert "v1" not in surface.markers
