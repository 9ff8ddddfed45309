from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any, cast

from aws_lambda_powertools import Logger

from .conflicts import find_conflict
from .ids import generate_id
from .models import BOOKING_STATUSES, BookingItem, BookingResult, ImportMode, Stats
from .notifier import ChangeNotifier, Listener
from .serialization import ImportParseError, bookings_to_csv, parse_import
from .store import DEFAULT_STORAGE_KEY, KeyValueStore, load_collection, save_collection
from .validation import parse_int, validate

logger = Logger()

SLOT_ALREADY_BOOKED = "slot already booked"
NOT_FOUND = "not found"
INVALID_STATUS = "invalid status"

# Fields a patch may never overwrite
_IMMUTABLE_FIELDS = ("id", "createdAt")


def _now() -> datetime:
    return datetime.now()


class BookingRepository:
    """Booking collection kept as one JSON array under a single store key.

    Every operation reads the whole collection, changes it in memory and
    writes it back. Successful writes are broadcast to subscribed listeners
    before the call returns.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        notifier: ChangeNotifier | None = None,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.store = store
        self.key = key
        self.notifier = notifier or ChangeNotifier()
        self.clock = clock

    # -- listeners ---------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.notifier.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self.notifier.unsubscribe(listener)

    # -- persistence -------------------------------------------------------

    def _load(self) -> list[BookingItem]:
        return load_collection(self.store, self.key)

    def _save(self, bookings: list[BookingItem]) -> None:
        save_collection(self.store, self.key, bookings)
        self.notifier.publish(bookings)

    @staticmethod
    def _index_of(bookings: list[BookingItem], booking_id: str) -> int | None:
        for idx, booking in enumerate(bookings):
            if booking.get("id") == booking_id:
                return idx
        return None

    # -- reads -------------------------------------------------------------

    def list_bookings(self) -> list[BookingItem]:
        return self._load()

    def get(self, booking_id: str) -> BookingItem | None:
        bookings = self._load()
        idx = self._index_of(bookings, booking_id)
        return None if idx is None else bookings[idx]

    # -- mutations ---------------------------------------------------------

    def create(self, candidate: Mapping[str, Any]) -> BookingResult:
        bookings = self._load()
        now = self.clock()

        outcome = validate(candidate, now)
        if not outcome.valid:
            logger.info("Rejected booking", extra={"reason": outcome.reason})
            return BookingResult.fail("validation", cast(str, outcome.reason))

        conflict = find_conflict(bookings, candidate)
        if conflict is not None:
            logger.info("Slot already booked", extra={"conflicts_with": conflict.get("id")})
            return BookingResult.fail("conflict", SLOT_ALREADY_BOOKED)

        booking = cast(BookingItem, dict(candidate))
        booking["id"] = generate_id({str(b.get("id")) for b in bookings})
        booking["status"] = "pending"
        booking["createdAt"] = now.isoformat()
        booking["price"] = str(candidate.get("price") or "0")

        bookings.append(booking)
        logger.info("Creating booking", extra={"booking_id": booking["id"]})
        self._save(bookings)
        return BookingResult.ok(copy.deepcopy(booking))

    def update_status(self, booking_id: str, status: str) -> BookingResult:
        if status not in BOOKING_STATUSES:
            return BookingResult.fail("validation", INVALID_STATUS)

        bookings = self._load()
        idx = self._index_of(bookings, booking_id)
        if idx is None:
            return BookingResult.fail("not_found", NOT_FOUND)

        bookings[idx]["status"] = status
        logger.info("Updating booking status", extra={"booking_id": booking_id, "status": status})
        self._save(bookings)
        return BookingResult.ok(copy.deepcopy(bookings[idx]))

    def cancel(self, booking_id: str) -> BookingResult:
        return self.update_status(booking_id, "cancelled")

    def update(self, booking_id: str, patch: Mapping[str, Any]) -> BookingResult:
        bookings = self._load()
        idx = self._index_of(bookings, booking_id)
        if idx is None:
            return BookingResult.fail("not_found", NOT_FOUND)

        # A None value means "leave unchanged"
        changes = {k: v for k, v in patch.items() if k not in _IMMUTABLE_FIELDS and v is not None}
        if "status" in changes and changes["status"] not in BOOKING_STATUSES:
            logger.info("Rejected booking update", extra={"booking_id": booking_id, "reason": INVALID_STATUS})
            return BookingResult.fail("validation", INVALID_STATUS)

        merged = cast(BookingItem, {**bookings[idx], **changes})

        outcome = validate(merged, self.clock())
        if not outcome.valid:
            logger.info("Rejected booking update", extra={"booking_id": booking_id, "reason": outcome.reason})
            return BookingResult.fail("validation", cast(str, outcome.reason))

        others = [b for i, b in enumerate(bookings) if i != idx]
        if find_conflict(others, merged) is not None:
            logger.info("Update collides with another booking", extra={"booking_id": booking_id})
            return BookingResult.fail("conflict", SLOT_ALREADY_BOOKED)

        merged["price"] = str(merged.get("price") or "0")
        bookings[idx] = merged
        logger.info("Updating booking", extra={"booking_id": booking_id, "fields": sorted(changes)})
        self._save(bookings)
        return BookingResult.ok(copy.deepcopy(merged))

    def delete(self, booking_id: str) -> None:
        bookings = [b for b in self._load() if b.get("id") != booking_id]
        logger.info("Deleting booking", extra={"booking_id": booking_id})
        self._save(bookings)

    # -- aggregation and bulk ----------------------------------------------

    def stats(self) -> Stats:
        bookings = self._load()
        today = self.clock().date().isoformat()
        return Stats(
            total=len(bookings),
            today=sum(1 for b in bookings if b.get("date") == today),
            pending=sum(1 for b in bookings if b.get("status") == "pending"),
            revenue=sum(
                parse_int(b.get("price")) or 0 for b in bookings if b.get("status") == "completed"
            ),
        )

    def export_csv(self) -> str:
        return bookings_to_csv(self._load())

    def import_json(self, text: str, mode: ImportMode = "merge") -> BookingResult:
        if mode not in ("replace", "merge"):
            raise ValueError(f"unknown import mode: {mode!r}")
        try:
            incoming = parse_import(text)
        except ImportParseError as exc:
            logger.info("Rejected import", extra={"reason": str(exc)})
            return BookingResult.fail("parse", str(exc))

        bookings = incoming if mode == "replace" else self._load() + incoming
        logger.info("Importing bookings", extra={"mode": mode, "count": len(incoming)})
        self._save(bookings)
        return BookingResult.ok()

    def seed_sample_data(self) -> bool:
        """Write a few demo bookings for tomorrow if the collection is empty."""
        bookings = self._load()
        if bookings:
            return False
        now = self.clock()
        tomorrow = (now + timedelta(days=1)).date().isoformat()
        samples = [
            ("Ahmed Mohammed", "712345678", "General consultation", "150", "09:00", "pending"),
            ("Sara Khaled", "712345679", "Dental checkup", "200", "10:00", "confirmed"),
            ("Youssef Ali", "712345680", "Dermatology and laser", "300", "11:30", "completed"),
        ]
        ids: set[str] = set()
        for name, phone, service, price, time, status in samples:
            booking_id = generate_id(ids)
            ids.add(booking_id)
            bookings.append(
                {
                    "id": booking_id,
                    "name": name,
                    "phone": phone,
                    "service": service,
                    "price": price,
                    "date": tomorrow,
                    "time": time,
                    "status": status,
                    "createdAt": now.isoformat(),
                }
            )
        logger.info("Seeding sample bookings", extra={"count": len(bookings)})
        self._save(bookings)
        return True

    list = list_bookings
