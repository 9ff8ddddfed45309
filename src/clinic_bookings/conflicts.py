from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .models import BookingItem


def same_slot(a: Mapping[str, Any], b: Mapping[str, Any]) -> bool:
    return (
        a.get("date") == b.get("date")
        and a.get("time") == b.get("time")
        and a.get("service") == b.get("service")
    )


def find_conflict(existing: Iterable[BookingItem], candidate: Mapping[str, Any]) -> BookingItem | None:
    """First non-cancelled booking occupying the candidate's slot, if any."""
    for booking in existing:
        if booking.get("status") != "cancelled" and same_slot(booking, candidate):
            return booking
    return None
