"""Persisted key-value storage for the line selection.

Reads and writes fail soft: a broken store never takes the map down, it
just falls back to showing everything.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from sllive.exceptions import SlLiveStorageError
from sllive.lines import normalize_line
from sllive.models.selection import SelectionState

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """Store backed by a single JSON object file.

    Writes go to a temporary file in the same directory which then replaces
    the original, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SlLiveStorageError(f"Could not read {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SlLiveStorageError(f"{self._path} does not contain a JSON object")
        return data

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except SlLiveStorageError:
            data = {}
        data[key] = value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            raise SlLiveStorageError(f"Could not write {self._path}: {exc}", key=key) from exc


def load_selection(store: KeyValueStore, key: str) -> SelectionState:
    """Read the persisted selection, falling back to ``ALL`` on any problem."""
    try:
        raw = store.get(key)
        if not raw:
            return SelectionState.all()
        tokens = json.loads(raw)
        if not isinstance(tokens, list):
            return SelectionState.all()
        return SelectionState.from_tokens(normalize_line(token) for token in tokens if isinstance(token, str))
    except Exception:
        _logger.debug("Ignoring unreadable selection under %s", key, exc_info=True)
        return SelectionState.all()


def save_selection(store: KeyValueStore, key: str, state: SelectionState) -> None:
    try:
        store.set(key, json.dumps(state.to_tokens()))
    except Exception:
        _logger.debug("Could not persist selection under %s", key, exc_info=True)
