"""
Health check router.

Endpoints:
  GET /health - store and event bus status, live subscriber and topic
                counts; 503 when the store or the bus is down
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from contactgraph import __version__

log = logging.getLogger("contactgraph.api.health")

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    """Report whether the record store and the event bus are usable."""
    state = request.app.state
    try:
        store_up = state.store.ping()
    except (sqlite3.Error, RuntimeError) as e:
        log.warning("Record store health check failed: %s", e)
        store_up = False
    bus = state.event_bus

    components: dict[str, Any] = {
        "store": "up" if store_up else "down",
        "event_bus": "up" if bus.is_connected else "down",
        "subscribers": getattr(bus, "subscriber_count", None),
        "topics": getattr(bus, "topic_count", None),
    }
    healthy = store_up and bus.is_connected
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "degraded",
            "version": __version__,
            "components": components,
        },
    )
