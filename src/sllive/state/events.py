"""Pointer events consumed by the label state machine.

Whatever hosts the map converts its pointer callbacks into these events.
Only the label state machine interprets them.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class LabelEventKind(StrEnum):
    POINTER_ENTER = "pointer_enter"
    POINTER_LEAVE = "pointer_leave"
    CLICK = "click"
    BACKGROUND_CLICK = "background_click"
    POINTER_MOVE = "pointer_move"


_VEHICLE_EVENTS = frozenset({LabelEventKind.POINTER_ENTER, LabelEventKind.POINTER_LEAVE, LabelEventKind.CLICK})


class LabelEvent(BaseModel):
    """A pointer event, targeted at a vehicle or at the map background."""

    model_config = ConfigDict(frozen=True)

    kind: LabelEventKind
    vehicle_id: str | None = None

    @model_validator(mode="after")
    def _check_target(self) -> LabelEvent:
        if self.kind in _VEHICLE_EVENTS and not self.vehicle_id:
            raise ValueError(f"{self.kind} requires a vehicle_id")
        if self.kind not in _VEHICLE_EVENTS and self.vehicle_id is not None:
            raise ValueError(f"{self.kind} does not target a vehicle")
        return self

    @classmethod
    def pointer_enter(cls, vehicle_id: str) -> LabelEvent:
        return cls(kind=LabelEventKind.POINTER_ENTER, vehicle_id=vehicle_id)

    @classmethod
    def pointer_leave(cls, vehicle_id: str) -> LabelEvent:
        return cls(kind=LabelEventKind.POINTER_LEAVE, vehicle_id=vehicle_id)

    @classmethod
    def click(cls, vehicle_id: str) -> LabelEvent:
        return cls(kind=LabelEventKind.CLICK, vehicle_id=vehicle_id)

    @classmethod
    def background_click(cls) -> LabelEvent:
        return cls(kind=LabelEventKind.BACKGROUND_CLICK)

    @classmethod
    def pointer_move(cls) -> LabelEvent:
        return cls(kind=LabelEventKind.POINTER_MOVE)
