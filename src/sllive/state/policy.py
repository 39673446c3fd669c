"""Ordering policy for overlapping poll ticks.

Ticks may overlap: a slow fetch can resolve after a later, faster one.
Each request carries a sequence number taken when it was issued.
"""

from __future__ import annotations


def should_apply_response(*, latest_applied: int | None, incoming: int, discard_stale: bool = True) -> bool:
    """Decide whether a snapshot response may overwrite the map.

    With ``discard_stale`` off every response is applied, in arrival order.
    """
    if not discard_stale or latest_applied is None:
        return True
    return incoming > latest_applied
