"""Trip lookup entry model."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from sllive.ingestion.normalize import safe_int, safe_str
from sllive.models._base import SlBaseModel


class TripInfo(SlBaseModel):
    """Static line information for one trip.

    Parameters
    ----------
    line : str
        Line designation as published (not yet normalized).
    headsign : str or None
        Destination shown on the vehicle.
    type : int or None
        GTFS extended route type (``700`` for bus).
    """

    line: str
    headsign: str | None = None
    type: int | None = None

    @field_validator("line", mode="before")
    @classmethod
    def _coerce_line(cls, value: Any) -> Any:
        text = safe_str(value)
        return text if text is not None else value

    @field_validator("headsign", mode="before")
    @classmethod
    def _coerce_headsign(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> int | None:
        return safe_int(value)
