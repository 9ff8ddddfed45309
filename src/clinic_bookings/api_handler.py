from __future__ import annotations

import copy
from typing import Any

from aws_lambda_powertools import Logger
from mangum import Mangum
from mangum.types import LambdaContext

from clinic_bookings.api import app

logger = Logger()

# The app keeps no startup state, so lifespan events are skipped
asgi_adapter = Mangum(app, lifespan="off")

_HTTP_DEFAULTS = {"sourceIp": "127.0.0.1", "userAgent": "clinic-bookings"}


def with_http_defaults(event: dict[str, Any]) -> dict[str, Any]:
    """Copy of an HTTP API v2.0 event with the request context Mangum reads.

    Hand-built events (local runs, scheduled invocations) often omit these.
    Other payload versions are returned unchanged.
    """
    if event.get("version") != "2.0":
        return event
    patched = copy.deepcopy(event)
    context = patched.setdefault("requestContext", {})
    context.setdefault("stage", "$default")
    http = context.setdefault("http", {})
    for field, value in _HTTP_DEFAULTS.items():
        http.setdefault(field, value)
    return patched


def lambda_handler(event: dict[str, Any], context: LambdaContext) -> Any:
    request = with_http_defaults(event)
    http = request.get("requestContext", {}).get("http", {})
    logger.debug("Bookings API request", extra={"method": http.get("method"), "path": http.get("path")})
    return asgi_adapter(request, context)
