from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, cast

from aws_lambda_powertools import Logger

if TYPE_CHECKING:
    # Only for static type checking; not imported at runtime
    from mypy_boto3_dynamodb.service_resource import Table as DynamoDBTable
else:
    DynamoDBTable = Any  # type: ignore[assignment]

from .models import BookingItem

logger = Logger()

DEFAULT_STORAGE_KEY = "clinic_bookings_db_v2"


class StorageCorruptedError(RuntimeError):
    """Stored collection could not be decoded into a list of bookings."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...


class InMemoryStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def put(self, key: str, value: str) -> None:
        self.values[key] = value


class FileStore:
    """One file per key under ``directory``; writes replace the file atomically."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def put(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class DynamoDBStore:
    """Keeps each key as a single item ``{"key": ..., "value": ...}``."""

    def __init__(self, table: DynamoDBTable) -> None:
        self._table = table

    def get(self, key: str) -> str | None:
        resp = cast(dict[str, Any], self._table.get_item(Key={"key": key}))
        item = resp.get("Item")
        if not isinstance(item, dict):
            return None
        value = item.get("value")
        return value if isinstance(value, str) else None

    def put(self, key: str, value: str) -> None:
        self._table.put_item(Item={"key": key, "value": value})  # type: ignore


def load_collection(store: KeyValueStore, key: str) -> list[BookingItem]:
    raw = store.get(key)
    if raw is None or raw == "":
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Stored bookings are not valid JSON", extra={"key": key})
        raise StorageCorruptedError(f"stored value under {key!r} is not valid JSON") from exc
    if not isinstance(data, list):
        logger.error("Stored bookings are not a list", extra={"key": key, "type": type(data).__name__})
        raise StorageCorruptedError(f"stored value under {key!r} is not a JSON array")
    return cast(list[BookingItem], data)


def save_collection(store: KeyValueStore, key: str, bookings: list[BookingItem]) -> None:
    payload = json.dumps(bookings, ensure_ascii=False)
    store.put(key, payload)
