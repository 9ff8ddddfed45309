from __future__ import annotations

from typing import Any

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.metrics import Metrics, MetricUnit
from fastapi import FastAPI, HTTPException, Request
from starlette.responses import Response

from clinic_bookings.config import build_repository
from clinic_bookings.models import (
    Booking,
    BookingCreate,
    BookingResult,
    BookingUpdate,
    ImportMode,
    Stats,
    StatusUpdate,
)
from clinic_bookings.repository import NOT_FOUND, BookingRepository

logger = Logger()
tracer = Tracer()
metrics = Metrics(namespace="ClinicBookings")

app = FastAPI(title="Clinic Bookings API", version="0.1.0")

repository: BookingRepository = build_repository()

INVALID_ENCODING = "payload is not valid UTF-8"

_ERROR_STATUS = {
    "validation": 422,
    "conflict": 409,
    "not_found": 404,
    "parse": 400,
}


def _unwrap(result: BookingResult) -> Booking:
    if not result.success:
        raise HTTPException(status_code=_ERROR_STATUS[result.error or "validation"], detail=result.message)
    return Booking.model_validate(result.booking)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@tracer.capture_method
@app.get("/bookings")
def list_bookings() -> list[dict[str, Any]]:
    return [dict(b) for b in repository.list()]


@tracer.capture_method
@app.post("/bookings", response_model=Booking, status_code=201)
def create_booking(payload: BookingCreate) -> Booking:
    metrics.add_metric(name="CreateBooking", value=1, unit=MetricUnit.Count)
    return _unwrap(repository.create(payload.model_dump(exclude_none=True)))


@tracer.capture_method
@app.get("/bookings/{booking_id}", response_model=Booking)
def get_booking(booking_id: str) -> Booking:
    booking = repository.get(booking_id)
    if booking is None:
        raise HTTPException(status_code=_ERROR_STATUS["not_found"], detail=NOT_FOUND)
    return Booking.model_validate(booking)


@tracer.capture_method
@app.patch("/bookings/{booking_id}", response_model=Booking)
def update_booking(booking_id: str, payload: BookingUpdate) -> Booking:
    return _unwrap(repository.update(booking_id, payload.model_dump(exclude_none=True)))


@tracer.capture_method
@app.put("/bookings/{booking_id}/status", response_model=Booking)
def update_booking_status(booking_id: str, payload: StatusUpdate) -> Booking:
    return _unwrap(repository.update_status(booking_id, payload.status))


@tracer.capture_method
@app.post("/bookings/{booking_id}/cancel", response_model=Booking)
def cancel_booking(booking_id: str) -> Booking:
    return _unwrap(repository.cancel(booking_id))


@tracer.capture_method
@app.delete("/bookings/{booking_id}")
def delete_booking(booking_id: str) -> Response:
    repository.delete(booking_id)
    return Response(status_code=204)


@tracer.capture_method
@app.get("/stats", response_model=Stats)
def get_stats() -> Stats:
    return repository.stats()


@tracer.capture_method
@app.get("/export.csv")
def export_csv() -> Response:
    return Response(content=repository.export_csv(), media_type="text/csv")


@tracer.capture_method
@app.post("/import")
async def import_bookings(request: Request, mode: ImportMode = "merge") -> dict[str, Any]:
    metrics.add_metric(name="ImportBookings", value=1, unit=MetricUnit.Count)
    try:
        text = (await request.body()).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=_ERROR_STATUS["parse"], detail=INVALID_ENCODING) from exc
    result = repository.import_json(text, mode)
    if not result.success:
        raise HTTPException(status_code=_ERROR_STATUS["parse"], detail=result.message)
    return {"success": True, "total": len(repository.list())}
