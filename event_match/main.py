"""event-match — groups independent reports of the same real-world event.

This is the application entry point.  It wires the MatchScheduler and the
HTTP endpoint together.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from event_match.api.event_match import create_event_match_router
from event_match.config import settings
from event_match.core.scheduler import MatchScheduler

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

# ── State ────────────────────────────────────────────────────────────────────

scheduler = MatchScheduler(
    max_request_skew=settings.max_request_skew_ms,
    max_clock_skew=settings.max_clock_skew_ms,
    max_queue_size=settings.max_queue_size,
    max_distance=settings.max_distance_m,
    interval=settings.interval_ms,
)

# ── App ──────────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Stop the scheduler on shutdown.  It starts itself on first use."""
    yield
    scheduler.stop()
    if scheduler.queue_length:
        logger.warning("Shutting down with %d unresolved event(s)", scheduler.queue_length)


app = FastAPI(
    title=settings.app_name,
    description="Time and location based matching of event reports",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(
    create_event_match_router(scheduler, max_request_bytes=settings.max_request_bytes)
)


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "scheduler_running": scheduler.running,
        "queue_length": scheduler.queue_length,
        "queue_capacity": scheduler.queue.capacity,
        **scheduler.stats,
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Running on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
