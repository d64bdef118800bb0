"""Integration health endpoints.

Operational view of the external data sources, plus manual disable/enable
for operators. These endpoints should be protected in production (not
implemented here).
"""

from datetime import datetime
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from matchcast.api.dependencies import get_tracker
from matchcast.services.health import SourceHealthTracker, get_availability

router = APIRouter(prefix="/api/integrations", tags=["integrations"])
logger = structlog.get_logger(__name__)


class SourceHealthResponse(BaseModel):
    """Health record of one source."""

    source: str
    state: str
    operational: bool
    fresh: bool
    last_success_at: Optional[datetime] = None
    last_attempt_at: Optional[datetime] = None
    last_failure_at: Optional[datetime] = None
    consecutive_failures: int
    successes_24h: int
    failures_24h: int
    success_rate_24h: float
    last_error: Optional[str] = None
    last_error_details: Optional[str] = None
    data_fresh_as_of: Optional[datetime] = None
    stale_threshold_hours: float
    average_sync_seconds: Optional[float] = None
    manually_disabled: bool
    disabled_reason: Optional[str] = None
    disabled_by: Optional[str] = None
    disabled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class AvailabilityResponse(BaseModel):
    """Factor category availability."""

    form: bool
    xg: bool
    odds: bool
    injuries: bool
    lineups: bool
    standings: bool
    elo: bool
    has_any_external_data: bool
    available_count: int


class DisableRequest(BaseModel):
    """Manual disable request."""

    reason: str = Field(..., description="Why the source is being disabled")
    disabled_by: str = Field(..., description="Operator taking the action")


class ActionResponse(BaseModel):
    source: str
    state: str
    message: str


def _resolve_source(source: str, tracker: SourceHealthTracker) -> str:
    """Only sources listed in defaults.yaml are addressable over the API."""
    name = source.lower()
    if name not in tracker.known_sources:
        raise HTTPException(status_code=400, detail=f"Unknown integration: {source}")
    return name


def _to_response(source: str, tracker: SourceHealthTracker) -> SourceHealthResponse:
    record = tracker.get(source)
    return SourceHealthResponse(
        **record.to_dict(),
        operational=tracker.is_operational(source),
        fresh=tracker.is_fresh(source),
    )


@router.get("", response_model=list[SourceHealthResponse])
async def list_integrations(tracker: SourceHealthTracker = Depends(get_tracker)):
    """Health of every known source, sorted by name."""
    return [_to_response(record.source, tracker) for record in tracker.get_all()]


@router.get("/availability", response_model=AvailabilityResponse)
async def availability(tracker: SourceHealthTracker = Depends(get_tracker)):
    """Which factor categories can currently be trusted."""
    return AvailabilityResponse(**get_availability(tracker).to_dict())


@router.get("/{source}", response_model=SourceHealthResponse)
async def get_integration(source: str, tracker: SourceHealthTracker = Depends(get_tracker)):
    name = _resolve_source(source, tracker)
    return _to_response(name, tracker)


@router.post("/{source}/disable", response_model=ActionResponse)
async def disable_integration(
    source: str,
    request: DisableRequest,
    tracker: SourceHealthTracker = Depends(get_tracker),
):
    """Take a source out of service until it is re-enabled."""
    name = _resolve_source(source, tracker)
    if not request.reason.strip():
        raise HTTPException(status_code=400, detail="Reason is required")
    if not request.disabled_by.strip():
        raise HTTPException(status_code=400, detail="disabled_by is required")

    record = tracker.disable(name, request.reason, request.disabled_by)
    return ActionResponse(source=name, state=record.state.value, message=f"{name} disabled")


@router.post("/{source}/enable", response_model=ActionResponse)
async def enable_integration(source: str, tracker: SourceHealthTracker = Depends(get_tracker)):
    """Re-enable a source. Health restarts from unknown."""
    name = _resolve_source(source, tracker)
    record = tracker.enable(name)
    return ActionResponse(source=name, state=record.state.value, message=f"{name} enabled")


@router.post("/{source}/reset", response_model=ActionResponse)
async def reset_integration(source: str, tracker: SourceHealthTracker = Depends(get_tracker)):
    """Discard a source's health history."""
    name = _resolve_source(source, tracker)
    record = tracker.reset(name)
    logger.info("integration_reset_via_api", source=name)
    return ActionResponse(source=name, state=record.state.value, message=f"{name} reset")


@router.post("/{source}/reset-counters", response_model=ActionResponse)
async def reset_counters(source: str, tracker: SourceHealthTracker = Depends(get_tracker)):
    """Zero the rolling 24h counters for a source."""
    name = _resolve_source(source, tracker)
    record = tracker.reset_daily_counters(name)
    return ActionResponse(
        source=name, state=record.state.value, message=f"{name} daily counters reset"
    )
