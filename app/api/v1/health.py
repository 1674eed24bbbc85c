"""Health check endpoint."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.config import settings

router = APIRouter()

_started_at = time.monotonic()

# Set by main.py during lifespan
_dispatcher = None
_search = None


def set_dispatcher(dispatcher):
    global _dispatcher
    _dispatcher = dispatcher


def set_search(search):
    global _search
    _search = search


@router.get("/health")
async def health_check():
    """Service health, catalog reachability, and job counts."""
    catalog = "unknown"
    if _search is not None:
        catalog = "up" if await _search.ping() else "down"

    jobs = _dispatcher.registry.count_by_status() if _dispatcher is not None else {}
    status = "healthy" if catalog != "down" and _dispatcher is not None else "degraded"

    body = {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime_seconds": int(time.monotonic() - _started_at),
        "version": settings.app_version,
        "services": {"catalog": catalog},
        "jobs": jobs,
    }
    return JSONResponse(body, status_code=200 if status == "healthy" else 503)
