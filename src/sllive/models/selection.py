"""Line selection state.

A selection is one of three variants:

* ``ALL``: no restriction (the default).
* ``NONE``: the user explicitly cleared everything.
* ``SUBSET``: only the listed canonical codes, plus every bus when
  ``bus_included`` is set.

On disk it is a JSON array of tokens: ``[]`` for ``ALL``, ``["__NONE__"]``
for ``NONE``, otherwise the codes plus ``"__BUS__"`` for the bus flag.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sllive._constants import BUS_TOKEN, NONE_TOKEN


class SelectionKind(StrEnum):
    ALL = "all"
    NONE = "none"
    SUBSET = "subset"


class SelectionState(BaseModel):
    """Immutable selection value."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: SelectionKind = SelectionKind.ALL
    codes: frozenset[str] = Field(default_factory=frozenset)
    bus_included: bool = False

    @model_validator(mode="after")
    def _check_variant(self) -> SelectionState:
        if self.kind != SelectionKind.SUBSET and (self.codes or self.bus_included):
            raise ValueError(f"{self.kind} selection cannot carry codes or the bus flag")
        if self.kind == SelectionKind.SUBSET and not self.codes and not self.bus_included:
            raise ValueError("subset selection must contain a code or the bus flag")
        return self

    @classmethod
    def all(cls) -> SelectionState:
        return cls(kind=SelectionKind.ALL)

    @classmethod
    def none(cls) -> SelectionState:
        return cls(kind=SelectionKind.NONE)

    @classmethod
    def subset(cls, codes: Iterable[str], *, bus_included: bool = False) -> SelectionState:
        """Build a subset, collapsing to ``NONE`` when it would be empty."""
        frozen = frozenset(codes)
        if not frozen and not bus_included:
            return cls.none()
        return cls(kind=SelectionKind.SUBSET, codes=frozen, bus_included=bus_included)

    @property
    def is_all(self) -> bool:
        return self.kind == SelectionKind.ALL

    @property
    def is_none(self) -> bool:
        return self.kind == SelectionKind.NONE

    @property
    def is_subset(self) -> bool:
        return self.kind == SelectionKind.SUBSET

    def to_tokens(self) -> list[str]:
        if self.is_all:
            return []
        if self.is_none:
            return [NONE_TOKEN]
        tokens = sorted(self.codes)
        if self.bus_included:
            tokens.append(BUS_TOKEN)
        return tokens

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> SelectionState:
        """Inverse of :meth:`to_tokens`. Tokens must already be normalized."""
        items = set(tokens)
        if NONE_TOKEN in items:
            return cls.none()
        if not items:
            return cls.all()
        bus_included = BUS_TOKEN in items
        items.discard(BUS_TOKEN)
        return cls.subset(items, bus_included=bus_included)
