"""Line classification: canonical codes, colors and transit modes."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

# First run of digits, optionally followed by letters ("43X", "27 S").
_LINE_CODE_RE = re.compile(r"(\d+\s*[A-Z]+|\d+)", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")

BUS_COLOR = "#020224"
DEFAULT_LINE_COLOR = "#111827"

_LINE_COLORS: dict[frozenset[str], str] = {
    frozenset({"7"}): "#878C85",
    frozenset({"10", "11"}): "#0091D2",
    frozenset({"12"}): "#738BA4",
    frozenset({"13", "14"}): "#E31F26",
    frozenset({"17", "18", "19"}): "#00B259",
    frozenset({"21"}): "#B76934",
    frozenset({"25", "26"}): "#21B6BA",
    frozenset({"27", "27S", "28", "28S", "29"}): "#A86DAE",
    frozenset({"30", "31"}): "#E08A32",
    frozenset({"40", "41", "43", "43X", "48"}): "#ED66A5",
}
_COLOR_BY_CODE: dict[str, str] = {code: color for codes, color in _LINE_COLORS.items() for code in codes}


def normalize_line(raw: Any) -> str:
    """Reduce a raw line designation to its canonical code.

    ``"Line 43X "`` → ``"43X"``, ``"27 s"`` → ``"27S"``. Strings without
    digits are kept whole, minus whitespace, uppercased. Idempotent.
    """
    text = "" if raw is None else str(raw).strip()
    match = _LINE_CODE_RE.search(text)
    code = match.group(1) if match else text
    return _WHITESPACE_RE.sub("", code).upper()


def color_for_line(line: Any) -> str:
    return _COLOR_BY_CODE.get(normalize_line(line), DEFAULT_LINE_COLOR)


def darken_hex(color: str, amount: float = 0.5) -> str:
    """Scale each channel of a ``#RRGGBB`` color towards black."""
    channels = (int(color[i : i + 2], 16) for i in (1, 3, 5))
    scaled = (max(0, min(255, math.floor(c * (1 - amount) + 0.5))) for c in channels)
    return "#" + "".join(f"{c:02x}" for c in scaled)


class TransitMode(StrEnum):
    METRO = "metro"
    COMMUTER = "commuter"
    TRAM = "tram"
    ROSLAGS = "roslags"
    SALTSJO = "saltsjo"
    LIDINGO = "lidingo"
    NOCKEBY = "nockeby"
    CITY = "city"
    BUS = "bus"


@dataclass(frozen=True, slots=True)
class ModeDefinition:
    """A filter group shown as one chip.

    ``lines`` is empty for the bus mode, which is selected through the
    reserved bus token instead of individual codes.
    """

    mode: TransitMode
    label: str
    lines: tuple[str, ...]
    color: str


MODE_DEFINITIONS: tuple[ModeDefinition, ...] = (
    ModeDefinition(TransitMode.METRO, "Tunnelbana", ("10", "11", "13", "14", "17", "18", "19"), "#00B259"),
    ModeDefinition(TransitMode.COMMUTER, "Pendeltåg", ("40", "41", "43", "43X", "48"), color_for_line("40")),
    ModeDefinition(TransitMode.TRAM, "Tvärbanan", ("30", "31"), color_for_line("30")),
    ModeDefinition(TransitMode.ROSLAGS, "Roslagsbanan", ("27", "27S", "28", "28S", "29"), color_for_line("28")),
    ModeDefinition(TransitMode.SALTSJO, "Saltsjöbanan", ("25", "26"), color_for_line("25")),
    ModeDefinition(TransitMode.LIDINGO, "Lidingöbanan", ("21",), color_for_line("21")),
    ModeDefinition(TransitMode.NOCKEBY, "Nockebybanan", ("12",), color_for_line("12")),
    ModeDefinition(TransitMode.CITY, "Spårväg City", ("7",), color_for_line("7")),
    ModeDefinition(TransitMode.BUS, "Buss", (), BUS_COLOR),
)
_MODE_BY_CODE: dict[str, TransitMode] = {
    code: definition.mode for definition in MODE_DEFINITIONS for code in definition.lines
}


def mode_definition(mode: TransitMode) -> ModeDefinition:
    for definition in MODE_DEFINITIONS:
        if definition.mode == mode:
            return definition
    raise KeyError(mode)


def classify_mode(line: Any) -> TransitMode | None:
    """Map a line code to its rail mode.

    Buses are never classified here; they are identified by vehicle type.
    """
    return _MODE_BY_CODE.get(normalize_line(line))
