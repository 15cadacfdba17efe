"""Job trigger endpoint."""

import logging

from fastapi import APIRouter, BackgroundTasks
from fastapi.responses import PlainTextResponse

from mj_relay.config import get_settings
from mj_relay.runner import run_detached_job

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["jobs"])

ACKNOWLEDGEMENT = "Midjourney script initiated. Check logs for progress."


@router.post("/trigger", response_class=PlainTextResponse)
async def trigger(background_tasks: BackgroundTasks) -> PlainTextResponse:
    """Start one job and acknowledge immediately.

    The job runs after the response is sent; its outcome is only logged.
    Unauthenticated -- protect this endpoint at the network edge.
    """
    logger.info("Received webhook trigger")
    background_tasks.add_task(run_detached_job, get_settings())
    return PlainTextResponse(ACKNOWLEDGEMENT, status_code=200)
