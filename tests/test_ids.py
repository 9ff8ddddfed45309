from __future__ import annotations

import re
from unittest.mock import patch

import pytest

from clinic_bookings import ids
from clinic_bookings.ids import generate_id, to_base36

ID_PATTERN = re.compile(r"^BK-[0-9A-Z]+-[0-9A-Z]{6}$")


def test_generated_id_shape() -> None:
    assert ID_PATTERN.match(generate_id())


def test_generated_ids_differ() -> None:
    generated = {generate_id() for _ in range(200)}
    assert len(generated) == 200  # noqa: PLR2004


def test_to_base36() -> None:
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_collision_with_existing_id_is_redrawn() -> None:
    draws = iter("aaaaaa" + "bbbbbb")
    with (
        patch.object(ids.secrets, "choice", side_effect=lambda _alphabet: next(draws)),
        patch.object(ids.time, "time_ns", return_value=36 * 1_000_000),
    ):
        booking_id = generate_id({"BK-10-AAAAAA"})
    assert booking_id == "BK-10-BBBBBB"
