from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import pytest

from clinic_bookings.validation import parse_int, validate

NOW = datetime(2030, 1, 1, 8, 0)


def candidate(**overrides: Any) -> dict[str, Any]:
    base: dict[str, Any] = dict(
        name="Ali Hassan",
        phone="712345678",
        service="checkup",
        price="100",
        date="2030-01-02",
        time="09:00",
    )
    base.update(overrides)
    return base


def test_valid_candidate() -> None:
    outcome = validate(candidate(), NOW)
    assert outcome.valid
    assert outcome.reason is None


@pytest.mark.parametrize("name", [None, "", "ab", "  ab  "])
def test_short_or_missing_name(name: Any) -> None:
    outcome = validate(candidate(name=name), NOW)
    assert not outcome.valid
    assert outcome.reason == "invalid name"


@pytest.mark.parametrize("phone", [None, "612345678", "71234567", "7123456789", "7123a5678"])
def test_bad_phone(phone: Any) -> None:
    assert validate(candidate(phone=phone), NOW).reason == "invalid phone format"


def test_phone_is_trimmed() -> None:
    assert validate(candidate(phone=" 712345678 "), NOW).valid


@pytest.mark.parametrize("field", ["date", "time"])
def test_missing_date_or_time(field: str) -> None:
    assert validate(candidate(**{field: ""}), NOW).reason == "missing date/time"


@pytest.mark.parametrize(("date", "time"), [("2030-02-30", "09:00"), ("2030-01-02", "25:00"), ("tomorrow", "09:00")])
def test_unparseable_date_time(date: str, time: str) -> None:
    assert validate(candidate(date=date, time=time), NOW).reason == "invalid date/time"


def test_past_slot_rejected() -> None:
    assert validate(candidate(date="2029-12-31"), NOW).reason == "time must be in the future"


def test_slot_within_tolerance_accepted() -> None:
    now = datetime(2030, 1, 2, 9, 0) + timedelta(milliseconds=500)
    assert validate(candidate(), now).valid


def test_slot_beyond_tolerance_rejected() -> None:
    now = datetime(2030, 1, 2, 9, 0, 2)
    assert validate(candidate(), now).reason == "time must be in the future"


@pytest.mark.parametrize("price", [None, "", "abc", "-5"])
def test_bad_price(price: Any) -> None:
    assert validate(candidate(price=price), NOW).reason == "invalid price"


def test_integer_price_accepted() -> None:
    assert validate(candidate(price=250), NOW).valid


def test_rules_short_circuit_in_order() -> None:
    # Every field is wrong; the name rule is reported first
    outcome = validate({"name": "x", "phone": "1", "price": "x"}, NOW)
    assert outcome.reason == "invalid name"
    outcome = validate({"name": "Ali", "phone": "1", "price": "x"}, NOW)
    assert outcome.reason == "invalid phone format"


def test_parse_int() -> None:
    assert parse_int("42") == 42  # noqa: PLR2004
    assert parse_int(" 7 ") == 7  # noqa: PLR2004
    assert parse_int(3) == 3  # noqa: PLR2004
    assert parse_int("4.5") is None
    assert parse_int(None) is None
    assert parse_int(True) is None


@pytest.mark.parametrize(
    ("date", "time"),
    [("2030-01-02", "9:00"), ("2030-1-2", "09:00"), ("2030-1-2", "9:0"), ("2030-01-02", "09:00:00"), ("2030-01-02", " 09:00")],
)
def test_slot_must_be_zero_padded(date: str, time: str) -> None:
    assert validate(candidate(date=date, time=time), NOW).reason == "invalid date/time"


def test_non_string_date_rejected() -> None:
    assert validate(candidate(date=20300102), NOW).reason == "invalid date/time"
