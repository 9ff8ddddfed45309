from __future__ import annotations

from typing import Any, Literal, TypedDict

from pydantic import BaseModel, ConfigDict, Field

BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
ErrorKind = Literal["validation", "conflict", "not_found", "parse"]
ImportMode = Literal["replace", "merge"]

BOOKING_STATUSES: tuple[str, ...] = ("pending", "confirmed", "completed", "cancelled")


class BookingItem(TypedDict, total=False):
    id: str
    name: str
    phone: str
    service: str
    price: str
    date: str
    time: str
    status: str
    createdAt: str


class BookingCreate(BaseModel):
    # Checked by validation.validate so failures come back as result messages
    name: str | None = None
    phone: str | None = None
    service: str | None = None
    price: str | int | None = None
    date: str | None = None
    time: str | None = None


class BookingUpdate(BaseModel):
    name: str | None = None
    phone: str | None = None
    service: str | None = None
    price: str | int | None = None
    date: str | None = None
    time: str | None = None
    status: BookingStatus | None = None


class StatusUpdate(BaseModel):
    status: BookingStatus


class Booking(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str = ""
    phone: str = ""
    service: str = ""
    price: str | int = ""
    date: str = ""
    time: str = ""
    status: str = "pending"
    created_at: str = Field(default="", alias="createdAt")


class ValidationOutcome(BaseModel):
    valid: bool
    reason: str | None = None


class BookingResult(BaseModel):
    success: bool
    message: str | None = None
    error: ErrorKind | None = None
    booking: dict[str, Any] | None = None

    @classmethod
    def ok(cls, booking: BookingItem | dict[str, Any] | None = None) -> BookingResult:
        return cls(success=True, booking=booking)

    @classmethod
    def fail(cls, error: ErrorKind, message: str) -> BookingResult:
        return cls(success=False, error=error, message=message)


class Stats(BaseModel):
    total: int = 0
    today: int = 0
    pending: int = 0
    revenue: int = 0
