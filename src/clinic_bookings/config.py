from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

import boto3
from aws_lambda_powertools import Logger
from pydantic import BaseModel

from .repository import BookingRepository
from .store import DEFAULT_STORAGE_KEY, DynamoDBStore, FileStore, InMemoryStore, KeyValueStore

logger = Logger()

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    backend: Literal["memory", "file", "dynamodb"] = "memory"
    storage_key: str = DEFAULT_STORAGE_KEY
    data_dir: str = "data"
    table_name: str = "bookings"
    seed_sample_data: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        backend = env.get("BOOKINGS_BACKEND", "memory").strip().lower()
        if backend not in ("memory", "file", "dynamodb"):
            raise ValueError(f"unknown BOOKINGS_BACKEND: {backend!r}")
        return cls(
            backend=backend,  # type: ignore[arg-type]
            storage_key=env.get("BOOKINGS_STORAGE_KEY", DEFAULT_STORAGE_KEY),
            data_dir=env.get("BOOKINGS_DATA_DIR", "data"),
            table_name=env.get("TABLE_NAME", "bookings"),
            seed_sample_data=env.get("BOOKINGS_SEED_SAMPLE_DATA", "").strip().lower() in _TRUTHY,
        )


def build_store(settings: Settings) -> KeyValueStore:
    if settings.backend == "file":
        return FileStore(settings.data_dir)
    if settings.backend == "dynamodb":
        table = boto3.resource("dynamodb").Table(settings.table_name)
        return DynamoDBStore(table)
    return InMemoryStore()


def build_repository(settings: Settings | None = None) -> BookingRepository:
    settings = settings or Settings.from_env()
    logger.info("Building booking repository", extra={"backend": settings.backend, "key": settings.storage_key})
    repository = BookingRepository(build_store(settings), key=settings.storage_key)
    if settings.seed_sample_data:
        repository.seed_sample_data()
    return repository
