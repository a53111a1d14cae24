"""REST endpoint for event matching.

Path: POST /event-match

Accepts a small JSON body describing when and where something happened,
hands it to the MatchScheduler, and holds the request open until the
scheduler decides.  Each outcome maps to its own status code:

    200  matched      {"token": ..., "data": [...]}
    404  no_match     {"error": "No match"}
    503  queue_full   {"error": "Match queue full"}
    500  anything else

No matching logic lives here — only field mapping and status codes.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from event_match.core.scheduler import MatchScheduler
from event_match.domain.errors import NoMatchError, QueueFullError
from event_match.domain.event import MISSING

logger = logging.getLogger(__name__)

# Order in which missing parameters are reported.
_REQUIRED_FIELDS = ("time", "latitude", "longitude")


class EventMatchRequest(BaseModel):
    """Inbound event report."""

    time: float = Field(..., description="When the event happened (ms)")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="Longitude in decimal degrees")
    latitude: float = Field(..., ge=-90.0, le=90.0, description="Latitude in decimal degrees")
    data: Any = Field(default=None, description="Opaque payload shared with matching submitters")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _first_invalid_field(exc: ValidationError) -> str | None:
    bad = {err["loc"][0] for err in exc.errors() if err.get("loc")}
    for name in _REQUIRED_FIELDS:
        if name in bad:
            return name
    return None


def create_event_match_router(
    scheduler: MatchScheduler,
    max_request_bytes: int = 1024,
) -> APIRouter:
    """Factory that wires the event-match endpoint to a concrete scheduler.

    Args:
        scheduler: The MatchScheduler that receives submissions.
        max_request_bytes: Largest accepted request body.
    """

    router = APIRouter(tags=["matching"])

    @router.post("/event-match")
    async def event_match(request: Request) -> JSONResponse:
        # ── Validate at the boundary ─────────────────────────────────────
        body = await request.body()
        if len(body) > max_request_bytes:
            return _error(413, "Request body too large")

        try:
            raw = json.loads(body or b"{}")
        except ValueError:
            return _error(400, "Request body must be valid JSON")
        if not isinstance(raw, dict):
            return _error(400, "Request body must be a JSON object")

        try:
            req = EventMatchRequest.model_validate(raw)
        except ValidationError as exc:
            field = _first_invalid_field(exc)
            if field is None:
                return _error(400, "Invalid request body")
            if raw.get(field) is None:
                return _error(400, f"Missing required parameter `{field}`")
            return _error(400, f"Invalid parameter `{field}`")

        # ── Submit and wait for the scheduler ────────────────────────────
        try:
            result = await scheduler.submit(
                req.time,
                req.longitude,
                req.latitude,
                raw.get("data", MISSING),
            )
        except NoMatchError:
            return _error(404, "No match")
        except QueueFullError:
            return _error(503, "Match queue full")
        except Exception:
            logger.exception("Event match failed")
            return _error(500, "Internal server error")

        return JSONResponse(status_code=200, content=result.model_dump())

    return router
