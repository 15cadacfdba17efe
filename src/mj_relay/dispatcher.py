"""Delivery of the extracted image URL to the downstream webhook."""

import logging

import httpx

from mj_relay.models.errors import DispatchFailure
from mj_relay.models.job import DispatchResult

logger = logging.getLogger(__name__)


async def dispatch_result(
    sink_url: str,
    image_url: str,
    prompt: str,
    timeout_seconds: float = 30.0,
) -> DispatchResult:
    """POST ``{"imageUrl", "prompt"}`` as JSON to the sink. Single attempt.

    Args:
        sink_url: Absolute webhook URL.
        image_url: Normalized image URL.
        prompt: The cleaned prompt the image was generated from.
        timeout_seconds: Total HTTP timeout.

    Returns:
        DispatchResult with the 2xx status and response body.

    Raises:
        DispatchFailure: non-2xx response (with status and body) or transport error.
    """
    payload = {"imageUrl": image_url, "prompt": prompt}
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds)) as client:
            response = await client.post(sink_url, json=payload)
    except httpx.HTTPError as exc:
        raise DispatchFailure(f"Error sending to webhook: {exc}", sink_url=sink_url) from exc

    if not response.is_success:
        raise DispatchFailure(
            f"Webhook rejected result: {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
            body=response.text,
            sink_url=sink_url,
        )

    logger.info("Image URL sent successfully to webhook", extra={"status_code": response.status_code})
    return DispatchResult(status_code=response.status_code, body=response.text)
