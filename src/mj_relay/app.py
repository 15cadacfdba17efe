"""FastAPI application with lifespan, health and trigger endpoints."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from mj_relay.config import get_settings
from mj_relay.logging_config import configure_logging
from mj_relay.router import router as jobs_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: load config and configure logging on startup."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    logger.info("Server is running on port %d", settings.port)
    yield


app = FastAPI(
    title="Midjourney Relay",
    lifespan=lifespan,
)
app.include_router(jobs_router)


@app.get("/health")
async def health():
    """Health check endpoint for the hosting platform and local development."""
    return {
        "status": "ok",
        "service": "mj-relay",
        "version": "0.1.0",
    }


def main() -> None:
    """Serve the app on the configured port."""
    settings = get_settings()
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)
