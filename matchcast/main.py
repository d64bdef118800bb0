"""MatchCast FastAPI application.

Operational surface for the multi-source prediction engine: source health,
data availability and configuration presets.
"""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from matchcast import __version__
from matchcast.api.routes import config, health, integrations
from matchcast.config import get_settings

settings = get_settings()

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("starting_matchcast", version=__version__)
    yield
    logger.info("shutting_down_matchcast")


# Create FastAPI application
app = FastAPI(
    title="MatchCast",
    description="Multi-source match prediction engine",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)

# Include API routers
app.include_router(health.router)
app.include_router(integrations.router)
app.include_router(config.router)


@app.exception_handler(500)
async def server_error_handler(request: Request, exc):
    """Custom 500 handler."""
    logger.error("server_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
