"""Line selection filter.

All transitions are pure functions of :class:`SelectionState`;
:class:`SelectionModel` holds the live value and persists it after every
change.
"""

from __future__ import annotations

import logging

from sllive._constants import BUS_SEARCH_WORDS, BUS_TOKEN, NONE_TOKEN, SELECTION_STORAGE_KEY
from sllive.lines import TransitMode, mode_definition, normalize_line
from sllive.models.selection import SelectionState
from sllive.models.snapshot import EnrichedVehicle
from sllive.state.storage import KeyValueStore, MemoryStore, load_selection, save_selection

_logger = logging.getLogger(__name__)


def toggle_line(state: SelectionState, code: str) -> SelectionState:
    """Toggle one line.

    From ``ALL`` or ``NONE`` this starts a fresh filter with just that
    line. Removing the last line yields ``NONE``, not ``ALL``.
    """
    line = normalize_line(code)
    if not line:
        return state
    if not state.is_subset:
        return SelectionState.subset({line})
    return SelectionState.subset(state.codes ^ {line}, bus_included=state.bus_included)


def toggle_bus_token(state: SelectionState) -> SelectionState:
    if not state.is_subset:
        return SelectionState.subset((), bus_included=True)
    return SelectionState.subset(state.codes, bus_included=not state.bus_included)


def selection_from_search(state: SelectionState, text: str | None) -> SelectionState:
    """Replace the selection with the comma-separated lines in *text*.

    ``bus``/``buss`` select every bus. Input that yields nothing leaves
    *state* untouched.
    """
    codes: set[str] = set()
    bus_included = False
    for part in (text or "").split(","):
        word = part.strip()
        if not word:
            continue
        if word.lower() in BUS_SEARCH_WORDS:
            bus_included = True
            continue
        line = normalize_line(word)
        if line == BUS_TOKEN:
            bus_included = True
        elif line and line != NONE_TOKEN:
            codes.add(line)

    if not codes and not bus_included:
        return state
    return SelectionState.subset(codes, bus_included=bus_included)


def is_visible(state: SelectionState, vehicle: EnrichedVehicle) -> bool:
    if state.is_none:
        return False
    if state.is_all:
        return True
    if vehicle.is_bus and state.bus_included:
        return True
    return vehicle.line in state.codes


def is_line_selected(state: SelectionState, code: str) -> bool:
    if state.is_none:
        return False
    if state.is_all:
        return True
    return normalize_line(code) in state.codes


def is_mode_active(state: SelectionState, mode: TransitMode) -> bool:
    """Whether a mode chip should look active for *state*.

    Any explicit code keeps the bus chip active, since the code may be a
    bus line.
    """
    if state.is_none:
        return False
    if state.is_all:
        return True
    if mode == TransitMode.BUS:
        return state.bus_included or bool(state.codes)
    return any(line in state.codes for line in mode_definition(mode).lines)


class SelectionModel:
    """The live selection, loaded from and saved to a key-value store."""

    def __init__(self, store: KeyValueStore | None = None, *, key: str = SELECTION_STORAGE_KEY) -> None:
        self._store: KeyValueStore = store if store is not None else MemoryStore()
        self._key = key
        self.state = load_selection(self._store, key)
        _logger.debug("Loaded selection %s", self.state.to_tokens())

    def _set(self, state: SelectionState) -> SelectionState:
        if state == self.state:
            return state
        self.state = state
        save_selection(self._store, self._key, state)
        return state

    def toggle_line(self, code: str) -> SelectionState:
        return self._set(toggle_line(self.state, code))

    def toggle_bus_token(self) -> SelectionState:
        return self._set(toggle_bus_token(self.state))

    def set_from_search(self, text: str | None) -> SelectionState:
        return self._set(selection_from_search(self.state, text))

    def show_all(self) -> SelectionState:
        return self._set(SelectionState.all())

    def show_none(self) -> SelectionState:
        return self._set(SelectionState.none())

    def is_visible(self, vehicle: EnrichedVehicle) -> bool:
        return is_visible(self.state, vehicle)

    def is_mode_active(self, mode: TransitMode) -> bool:
        return is_mode_active(self.state, mode)
