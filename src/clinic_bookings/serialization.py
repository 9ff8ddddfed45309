from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from typing import Any, cast

from .models import BookingItem

CSV_COLUMNS: tuple[str, ...] = (
    "id",
    "name",
    "phone",
    "service",
    "price",
    "date",
    "time",
    "status",
    "createdAt",
)

INVALID_JSON = "invalid JSON"
NOT_AN_ARRAY = "expected a JSON array"
NOT_OBJECTS = "expected an array of objects"


class ImportParseError(ValueError):
    pass


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def bookings_to_csv(bookings: Sequence[BookingItem]) -> str:
    """Header plus one fully quoted row per booking, rows joined by ``\\n``."""
    if not bookings:
        return ""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(CSV_COLUMNS) + "\n")
    for booking in bookings:
        writer.writerow([_cell(booking.get(column)) for column in CSV_COLUMNS])
    return buffer.getvalue().removesuffix("\n")


def parse_import(text: str) -> list[BookingItem]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ImportParseError(INVALID_JSON) from exc
    if not isinstance(data, list):
        raise ImportParseError(NOT_AN_ARRAY)
    if not all(isinstance(item, dict) for item in data):
        raise ImportParseError(NOT_OBJECTS)
    return cast(list[BookingItem], data)
