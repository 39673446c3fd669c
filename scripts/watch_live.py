#!/usr/bin/env python3
"""Watch the live vehicle feed without a map.

Polls the snapshot endpoint through :class:`sllive.SlLiveClient`, draws
onto a headless surface and prints what every tick did.

Usage
-----
::

    python scripts/watch_live.py --trips trips.json --seconds 30

Options::

    --trips FILE         Trip table, a JSON object {tripId: {line, headsign, type}}
    --seconds N          How long to watch (default: 30)
    --lines 14,4,bus     Start with this line filter instead of the saved one
    --state FILE         Persist the line selection in FILE
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections import Counter
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from sllive import (  # noqa: E402
    ArrowIcon,
    HeadlessSurface,
    LiveMapConfig,
    SlLiveClient,
    SlLiveLookupError,
    StaticTripLookup,
    TickReport,
)


def _print_tick(report: TickReport, surface: HeadlessSurface) -> None:
    arrows = sum(1 for _pos, icon in surface.markers.values() if isinstance(icon, ArrowIcon))
    print(
        f"tick: {report.received:4d} received  {report.skipped:4d} skipped  {report.hidden:4d} hidden  "
        f"+{report.created:<3d} ~{report.updated:<4d} -{report.evicted:<3d}  "
        f"on map {len(surface.markers)} ({arrows} with heading)"
    )


async def main() -> None:
    parser = argparse.ArgumentParser(description="Watch live vehicle positions on a headless map.")
    parser.add_argument("--trips", required=True, help="Trip table JSON file")
    parser.add_argument("--seconds", type=float, default=30.0, help="How long to watch (default: 30)")
    parser.add_argument("--lines", help="Comma-separated line filter, e.g. '14,4,bus'")
    parser.add_argument("--state", help="Persist the line selection in this JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        trips = StaticTripLookup.from_json_file(args.trips)
    except SlLiveLookupError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    overrides = {"state_path": args.state} if args.state else {}
    config = LiveMapConfig.from_env(**overrides)
    surface = HeadlessSurface()

    print(f"trips loaded: {len(trips)}")
    print(f"endpoint    : {config.api_url} every {config.poll_interval:g}s")

    async with SlLiveClient(
        config,
        surface=surface,
        trips=trips,
        on_tick=lambda report: _print_tick(report, surface),
    ) as client:
        client.set_visible(True)
        if args.lines:
            await client.set_from_search(args.lines)
        print(f"selection   : {client.selection.to_tokens() or 'all lines'}")
        await asyncio.sleep(args.seconds)
        client.set_visible(False)

        lines = Counter(track.vehicle.line for track in client.session.tracker)
        print("\nvehicles per line:")
        for line, count in sorted(lines.items(), key=lambda item: (-item[1], item[0])):
            print(f"  {line:>5}: {count}")


if __name__ == "__main__":
    asyncio.run(main())
