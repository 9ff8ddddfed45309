from __future__ import annotations

from clinic_bookings.conflicts import find_conflict
from clinic_bookings.models import BookingItem


def booking(booking_id: str, **overrides: str) -> BookingItem:
    base: BookingItem = {
        "id": booking_id,
        "service": "checkup",
        "date": "2030-01-02",
        "time": "09:00",
        "status": "pending",
    }
    base.update(overrides)  # type: ignore[typeddict-item]
    return base


def test_same_slot_conflicts() -> None:
    existing = [booking("a"), booking("b", time="10:00")]
    conflict = find_conflict(existing, {"service": "checkup", "date": "2030-01-02", "time": "09:00"})
    assert conflict is not None
    assert conflict["id"] == "a"


def test_different_service_or_time_does_not_conflict() -> None:
    existing = [booking("a")]
    assert find_conflict(existing, {"service": "dental", "date": "2030-01-02", "time": "09:00"}) is None
    assert find_conflict(existing, {"service": "checkup", "date": "2030-01-02", "time": "09:30"}) is None
    assert find_conflict(existing, {"service": "checkup", "date": "2030-01-03", "time": "09:00"}) is None


def test_cancelled_booking_frees_slot() -> None:
    existing = [booking("a", status="cancelled")]
    assert find_conflict(existing, {"service": "checkup", "date": "2030-01-02", "time": "09:00"}) is None


def test_confirmed_and_completed_still_block() -> None:
    for status in ("confirmed", "completed"):
        existing = [booking("a", status=status)]
        assert find_conflict(existing, {"service": "checkup", "date": "2030-01-02", "time": "09:00"}) is not None


def test_empty_collection() -> None:
    assert find_conflict([], {"service": "checkup", "date": "2030-01-02", "time": "09:00"}) is None
