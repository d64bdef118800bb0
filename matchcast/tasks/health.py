"""Source health maintenance tasks.

Health records live in the memory of the API process, so the worker never
touches a tracker itself: it asks the API to reset each source.
"""

import httpx
import structlog

from matchcast.config import get_settings
from matchcast.services.health.tracker import load_stale_thresholds
from matchcast.tasks import celery_app

logger = structlog.get_logger(__name__)


def _api_client() -> httpx.AsyncClient:
    """HTTP client pointed at the process that owns the health tracker."""
    settings = get_settings()
    return httpx.AsyncClient(base_url=settings.api_base_url, timeout=10.0)


@celery_app.task(name="matchcast.tasks.health.reset_daily_counters")
def reset_daily_counters() -> dict:
    """
    Scheduled: Daily at 00:00 UTC

    Zero the rolling 24h success/failure counters of every known source.
    Running it twice in a day is harmless.
    """
    import asyncio

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(_reset_daily_counters_async())
    finally:
        loop.close()


async def _reset_daily_counters_async() -> dict:
    """Async implementation of the daily counter reset."""
    thresholds, _ = load_stale_thresholds()
    reset: list[str] = []
    failed: list[str] = []

    async with _api_client() as client:
        for source in sorted(thresholds):
            try:
                response = await client.post(f"/api/integrations/{source}/reset-counters")
                response.raise_for_status()
                reset.append(source)
            except httpx.HTTPError as e:
                logger.error("daily_counter_reset_failed", source=source, error=str(e))
                failed.append(source)

    logger.info("daily_counters_reset", sources=len(reset), failed=len(failed))
    return {"sources_reset": len(reset), "failed": failed}
