from __future__ import annotations

import secrets
import string
import time
from collections.abc import Collection

ID_PREFIX = "BK"
_ALPHABET = string.digits + string.ascii_lowercase
_RANDOM_LENGTH = 6


def to_base36(n: int) -> str:
    if n < 0:
        raise ValueError("base36 encoding expects a non-negative integer")
    if n == 0:
        return "0"
    digits: list[str] = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id(existing_ids: Collection[str] = ()) -> str:
    """Short booking id: prefix, millisecond clock and random part in base36.

    Ids are only practically unique; a draw that collides with one of
    ``existing_ids`` is simply repeated.
    """
    while True:
        stamp = to_base36(time.time_ns() // 1_000_000)
        rand = "".join(secrets.choice(_ALPHABET) for _ in range(_RANDOM_LENGTH))
        booking_id = f"{ID_PREFIX}-{stamp}-{rand}".upper()
        if booking_id not in existing_ids:
            return booking_id
