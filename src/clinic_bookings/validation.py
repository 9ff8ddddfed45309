from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from .models import ValidationOutcome

PHONE_PATTERN = re.compile(r"7[0-9]{8}")
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
TIME_PATTERN = re.compile(r"[0-9]{2}:[0-9]{2}")
DATETIME_FORMAT = "%Y-%m-%d %H:%M"
# Absorbs the gap between building a request and validating it
FUTURE_TOLERANCE = timedelta(seconds=1)

INVALID_NAME = "invalid name"
INVALID_PHONE = "invalid phone format"
MISSING_DATETIME = "missing date/time"
INVALID_DATETIME = "invalid date/time"
NOT_IN_FUTURE = "time must be in the future"
INVALID_PRICE = "invalid price"


def parse_int(value: Any) -> int | None:
    """Integer value of ``value`` or ``None`` when it does not encode one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def slot_instant(date: Any, time: Any) -> datetime | None:
    # Only zero-padded forms, so one slot has exactly one spelling
    if not isinstance(date, str) or not DATE_PATTERN.fullmatch(date):
        return None
    if not isinstance(time, str) or not TIME_PATTERN.fullmatch(time):
        return None
    try:
        return datetime.strptime(f"{date} {time}", DATETIME_FORMAT)
    except ValueError:
        return None


def validate(candidate: Mapping[str, Any], now: datetime | None = None) -> ValidationOutcome:
    """Check a booking candidate against the booking rules.

    Rules run in a fixed order and the first failing one decides the reason:
    name, phone, presence of date and time, parseable date and time, the slot
    not being in the past, and finally the price.
    """
    now = now or datetime.now()

    name = candidate.get("name")
    if not isinstance(name, str) or len(name.strip()) < 3:
        return ValidationOutcome(valid=False, reason=INVALID_NAME)

    phone = str(candidate.get("phone") or "").strip()
    if not PHONE_PATTERN.fullmatch(phone):
        return ValidationOutcome(valid=False, reason=INVALID_PHONE)

    date, time = candidate.get("date"), candidate.get("time")
    if not date or not time:
        return ValidationOutcome(valid=False, reason=MISSING_DATETIME)

    instant = slot_instant(date, time)
    if instant is None:
        return ValidationOutcome(valid=False, reason=INVALID_DATETIME)
    if instant < now - FUTURE_TOLERANCE:
        return ValidationOutcome(valid=False, reason=NOT_IN_FUTURE)

    price = parse_int(candidate.get("price"))
    if price is None or price < 0:
        return ValidationOutcome(valid=False, reason=INVALID_PRICE)

    return ValidationOutcome(valid=True)
