"""High-level async client that keeps a map in sync with the live feed."""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp

from sllive._frames import Clock, FrameScheduler
from sllive._transport import HttpSnapshotTransport, SnapshotTransport
from sllive.config import LiveMapConfig
from sllive.exceptions import SlLiveError, SlLiveTransportError
from sllive.ingestion.snapshot import fetch_snapshot
from sllive.ingestion.trips import TripLookup
from sllive.models.selection import SelectionState
from sllive.render import RenderSurface
from sllive.session import LiveSession, TickReport
from sllive.state.events import LabelEvent
from sllive.state.labels import LabelPhase
from sllive.state.policy import should_apply_response
from sllive.state.storage import JsonFileStore, KeyValueStore, MemoryStore

_logger = logging.getLogger(__name__)


class SlLiveClient:
    """Async client for the live vehicle map.

    Usage::

        async with SlLiveClient(config, surface=surface, trips=trips) as client:
            client.set_visible(True)
            ...

    Polling runs only while the map is visible. Hiding it cancels the
    timer and settles running animations; showing it again restarts the
    timer with an immediate tick.
    """

    def __init__(
        self,
        config: LiveMapConfig,
        *,
        surface: RenderSurface,
        trips: TripLookup,
        store: KeyValueStore | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: SnapshotTransport | None = None,
        scheduler: FrameScheduler | None = None,
        clock: Clock = time.monotonic,
        on_tick: Callable[[TickReport], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._on_tick = on_tick
        if store is None:
            store = JsonFileStore(config.state_path) if config.state_path else MemoryStore()
        self.session = LiveSession(
            config,
            surface=surface,
            trips=trips,
            store=store,
            scheduler=scheduler,
            clock=clock,
        )
        self._sequence = itertools.count(1)
        self._latest_applied: int | None = None
        self._visible = False
        self._poll_task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[Any]] = set()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SlLiveClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpSnapshotTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self._visible = False
        self.stop_polling()
        for task in list(self._pending):
            task.cancel()
        for task in list(self._pending):
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._pending.clear()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> SnapshotTransport:
        if self._transport is None:
            raise SlLiveError("Client not initialized. Use 'async with SlLiveClient(...) as client:'")
        return self._transport

    def _spawn_refresh(self) -> asyncio.Task[TickReport | None]:
        task = asyncio.create_task(self._refresh_logged())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _refresh_logged(self) -> TickReport | None:
        try:
            return await self.refresh()
        except Exception:
            _logger.exception("Poll tick failed")
            return None

    async def _poll_loop(self) -> None:
        interval = self._config.poll_interval
        while True:
            await asyncio.sleep(interval)
            # No debounce: a slow tick may still be in flight.
            self._spawn_refresh()

    # ------------------------------------------------------------------
    # Polling and visibility
    # ------------------------------------------------------------------

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def start_polling(self) -> None:
        self.stop_polling()
        self._poll_task = asyncio.create_task(self._poll_loop())

    def stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is not None:
            task.cancel()

    def set_visible(self, visible: bool) -> None:
        """Report a visibility change of the map (tab focus, window state)."""
        if visible:
            self._visible = True
            self.start_polling()
            self._spawn_refresh()
            return
        self._visible = False
        self.stop_polling()
        self.session.tracker.finish_animations()

    async def refresh(self) -> TickReport | None:
        """Run one poll tick.

        Returns ``None`` when the tick was skipped: the map is hidden, the
        fetch failed, or a newer response was applied first.
        """
        if not self._visible:
            return None
        transport = self._require_transport()
        sequence = next(self._sequence)

        try:
            payload = await fetch_snapshot(transport)
        except SlLiveTransportError as exc:
            _logger.warning("Snapshot fetch failed, skipping tick: %s", exc)
            return None

        if not self._visible:
            _logger.debug("Map hidden while fetching snapshot #%d; dropping it", sequence)
            return None

        if not should_apply_response(
            latest_applied=self._latest_applied,
            incoming=sequence,
            discard_stale=self._config.discard_stale_responses,
        ):
            _logger.debug("Discarding stale snapshot #%d (applied #%d)", sequence, self._latest_applied)
            return None
        self._latest_applied = sequence if self._latest_applied is None else max(self._latest_applied, sequence)

        report = self.session.apply_snapshot(payload)
        if self._on_tick is not None:
            self._on_tick(report)
        return report

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selection(self) -> SelectionState:
        return self.session.selection.state

    async def _after_selection_change(self, state: SelectionState) -> SelectionState:
        if state.is_none:
            self.session.evict_all()
        else:
            await self.refresh()
        return state

    async def toggle_line(self, code: str) -> SelectionState:
        return await self._after_selection_change(self.session.selection.toggle_line(code))

    async def toggle_bus_token(self) -> SelectionState:
        return await self._after_selection_change(self.session.selection.toggle_bus_token())

    async def set_from_search(self, text: str | None) -> SelectionState:
        return await self._after_selection_change(self.session.selection.set_from_search(text))

    async def show_all(self) -> SelectionState:
        return await self._after_selection_change(self.session.selection.show_all())

    async def show_none(self) -> SelectionState:
        return await self._after_selection_change(self.session.selection.show_none())

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_enter(self, vehicle_id: str) -> LabelPhase:
        return self.session.handle_label_event(LabelEvent.pointer_enter(vehicle_id))

    def pointer_leave(self, vehicle_id: str) -> LabelPhase:
        return self.session.handle_label_event(LabelEvent.pointer_leave(vehicle_id))

    def click(self, vehicle_id: str) -> LabelPhase:
        return self.session.handle_label_event(LabelEvent.click(vehicle_id))

    def background_click(self) -> LabelPhase:
        return self.session.handle_label_event(LabelEvent.background_click())

    def pointer_move(self) -> LabelPhase:
        return self.session.handle_label_event(LabelEvent.pointer_move())
