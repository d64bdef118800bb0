"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from matchcast.api.dependencies import get_tracker
from matchcast.services.health import SourceHealthTracker, get_availability

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime


class ReadyResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    operational_sources: int
    has_any_external_data: bool


@router.get("/health", response_model=HealthResponse)
async def health():
    """
    Basic health check.

    Returns healthy if the service is running.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/ready", response_model=ReadyResponse)
async def ready(tracker: SourceHealthTracker = Depends(get_tracker)):
    """
    Readiness check.

    Predictions are always producible (the fallback needs no data), so the
    service is ready as soon as it is up; the counts are informational.
    """
    operational = sum(1 for s in tracker.known_sources if tracker.is_operational(s))
    return ReadyResponse(
        ready=True,
        operational_sources=operational,
        has_any_external_data=get_availability(tracker).has_any_external_data,
    )
