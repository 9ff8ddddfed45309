from __future__ import annotations

import copy
from collections.abc import Callable

from aws_lambda_powertools import Logger

from .models import BookingItem

logger = Logger()

Listener = Callable[[list[BookingItem]], None]


class ChangeNotifier:
    """Synchronous fan-out of the booking collection after each write.

    Listeners run in registration order. A listener that raises is logged and
    skipped; the write that triggered the broadcast stays in place.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, bookings: list[BookingItem]) -> None:
        for listener in list(self._listeners):
            try:
                # Each listener gets its own snapshot
                listener(copy.deepcopy(bookings))
            except Exception:
                logger.exception(
                    "Bookings listener failed",
                    extra={"listener": getattr(listener, "__name__", repr(listener))},
                )
